# budget_tracker/outputs/csv_output.py

import os
import csv
from budget_tracker.outputs.base import BaseOutput


class CSVOutput(BaseOutput):
    """
    Writes one row per budget category to Budget<YYYY-MM>.csv, in catalog
    order with the overflow category last.
    """
    def __init__(self, config):
        self.config     = config
        self.output_dir = config.get('output_dir', 'data')

    def write(self, categories, window):
        os.makedirs(self.output_dir, exist_ok=True)
        month = window.start[:7]
        out_path = os.path.join(self.output_dir, f"Budget{month}.csv")

        with open(out_path, 'w', newline='') as f:
            writer = csv.writer(f)
            writer.writerow(['category', 'allocated', 'spent', 'remaining', 'transactions'])
            for cat in categories:
                writer.writerow([
                    cat.name,
                    f"{cat.allocated_amount:.2f}",
                    f"{cat.spent_amount:.2f}",
                    f"{cat.remaining_amount:.2f}",
                    len(cat.transactions),
                ])

        return f"Written {len(categories)} categories to {out_path}"
