# drive_store.py
#
# MIT License
#
# Copyright (c) 2025 Chris Cullin

import json
import logging
import os

import constants as c
from drive_session import DriveSummary

logger = logging.getLogger(__name__)


class DriveStore:
    """Append-only JSON list of finished drive summaries."""

    def __init__(self, path=c.DRIVES_FILE):
        self.path = path

    # ---------------------------------------------------------------------------
    def load(self):
        """Returns every stored record, oldest first. Missing or unreadable file -> []."""
        if not os.path.exists(self.path):
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                drives = json.load(f)
        except (OSError, ValueError) as e:
            logger.error("Could not read drive store %s: %s", self.path, e)
            return []
        if not isinstance(drives, list):
            logger.error("Drive store %s does not hold a list, ignoring it", self.path)
            return []
        return drives

    # ---------------------------------------------------------------------------
    def append(self, summary):
        record = summary.to_record() if isinstance(summary, DriveSummary) else dict(summary)
        drives = self.load()
        drives.append(record)
        self._write(drives)
        return record

    def delete_by_start_time(self, start_time):
        drives = self.load()
        kept = [d for d in drives if d.get("start_time") != start_time]
        removed = len(drives) - len(kept)
        if removed:
            self._write(kept)
        return removed

    def recent(self, count=3):
        """Newest ``count`` records, newest first."""
        drives = self.load()
        return list(reversed(drives[-count:])) if count > 0 else []

    def clear(self):
        if os.path.exists(self.path):
            os.remove(self.path)

    # ---------------------------------------------------------------------------
    def _write(self, drives):
        # atomic replace
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(drives, f, indent=2)
        os.replace(tmp_path, self.path)
