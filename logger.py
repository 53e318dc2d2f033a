# logger.py
#
# MIT License
#
# Copyright (c) 2025 Chris Cullin

import csv
import time

import constants as c


class Logger:
    """Writes one CSV row per accepted sample, columns taken from the live snapshot."""

    def __init__(self, snapshot, path=c.LOGFILE):
        self.start_time = time.time()
        self.path = path
        self.keys = list(snapshot.keys())
        self.csv_file = open(path, "w", newline="")
        self.writer = csv.writer(self.csv_file)

        self.writer.writerow(["wall_time_s", *self.keys])

    # ---------------------------------------------------------------------------
    def log(self, snapshot):
        t = time.time() - self.start_time

        row_values = [t, *(snapshot[k] for k in self.keys)]

        # floats to 3 decimals
        final_row = [
            "{:.3f}".format(v) if isinstance(v, float) else str(v) for v in row_values
        ]
        self.writer.writerow(final_row)
        self.csv_file.flush()

    __call__ = log

    def close(self):
        if not self.csv_file.closed:
            self.csv_file.close()
