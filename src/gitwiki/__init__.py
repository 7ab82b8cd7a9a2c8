"""gitwiki: serve a git-hosted tree of Markdown and PDF documents.

Layout:
    gitwiki/
    ├── repo/          # Working copy: clone, fetch/pull, listings, git timestamps
    ├── content/       # ContentFile model + navigation tree builder
    ├── render/        # Frontmatter, asset rewriting, highlighted HTML
    ├── cache.py       # Namespaced TTL cache
    ├── core.py        # Wiki orchestrator (listing / document / search)
    └── scheduler.py   # Periodic sync
"""

__version__ = "0.1.0"
