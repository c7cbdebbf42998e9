# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Database backends for the repository code annotator."""

from rca.database.sqlite import SQLiteRepoCache

__all__ = ["SQLiteRepoCache"]
