"""Top‑level package for Folder Tidy.

Folder Tidy inspects a directory tree, sorts every visible regular file
into a category (Images, Documents, Videos, Audio, Archives, Code,
Applications, Duplicates or Other) and proposes moves that regroup the
tree by category.  Moves are only carried out once a caller approves
them, and files are never rewritten or deleted.

A file's category is decided by a fixed precedence of rules:

1. identical content elsewhere in the tree makes it a duplicate;
2. content sniffed from the first bytes overrides a misleading extension;
3. a folder already dominated by one category keeps its files together
   under ``<category>/<folder>``;
4. otherwise the extension decides.

Configuration lives in ``config.json`` resolved by
:class:`folder_tidy.config_service.ConfigService` (AppData mode by
default, portable mode with ``--portable`` or a ``portable.flag`` file).

The public API surface consists of:

* :func:`folder_tidy.engine.analyze_directory` and
  :func:`folder_tidy.engine.execute_moves` – the two boundary operations,
  returning JSON-shaped dictionaries.
* :class:`folder_tidy.engine.FolderTidyEngine` – the engine behind them.
* :class:`folder_tidy.config_service.ConfigService` – configuration.
* :mod:`folder_tidy.cli` – the ``folder-tidy`` command.
"""

from .config_service import ConfigService  # noqa: F401
from .engine import FolderTidyEngine, analyze_directory, execute_moves  # noqa: F401
