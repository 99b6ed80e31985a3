from budget_tracker.outputs.base import BaseOutput


def format_budget_table(categories):
    lines = [f"{'Category':<16}{'Allocated':>12}{'Spent':>12}{'Remaining':>12}"]
    for cat in categories:
        flag = "  OVER" if cat.over_budget else ""
        lines.append(
            f"{cat.name:<16}{cat.allocated_amount:>12.2f}{cat.spent_amount:>12.2f}"
            f"{cat.remaining_amount:>12.2f}{flag}"
        )
    return "\n".join(lines)


def format_expense_summary(summary):
    return "\n".join([
        f"Total expenses: {summary.total_expenses:.2f}",
        f"Total incoming: {summary.total_incoming:.2f}",
        f"Net position:   {summary.net_position:.2f}",
    ])


class TextOutput(BaseOutput):
    """Plain console table of the budget."""

    def __init__(self, config):
        self.config = config

    def write(self, categories, window):
        header = f"Budget {window.start[:10]} to {window.end[:10]}"
        return header + "\n" + format_budget_table(categories)
