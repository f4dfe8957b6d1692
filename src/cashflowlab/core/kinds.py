"""
CashflowLab kind constants (frequencies, directions, tweak modes).
"""


class F:
    # === Recurrence frequencies ===
    ONCE = "once"
    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"  # every 14 days from the first matching weekday
    MONTHLY = "monthly"  # by day of month or by nth weekday

    @classmethod
    def all_kinds(cls) -> list[str]:
        """Enumerate all known frequencies (for validation and docs)."""
        return [cls.ONCE, cls.DAILY, cls.WEEKLY, cls.BIWEEKLY, cls.MONTHLY]


class MonthlyMode:
    DAY = "day"
    NTH = "nth"


class Direction:
    INCOME = "income"
    EXPENSE = "expense"

    @classmethod
    def all_kinds(cls) -> list[str]:
        return [cls.INCOME, cls.EXPENSE]


class TweakMode:
    PERCENT = "percent"
    DELTA = "delta"  # composes exactly like PERCENT
    EFFECTIVE = "effective"  # absolute per-occurrence override
    WEEKLY = "weekly"  # weekly target spread over estimated occurrences

    @classmethod
    def all_kinds(cls) -> list[str]:
        return [cls.PERCENT, cls.DELTA, cls.EFFECTIVE, cls.WEEKLY]

    @classmethod
    def locked_kinds(cls) -> list[str]:
        """Modes that ignore percent/delta tweaks."""
        return [cls.EFFECTIVE, cls.WEEKLY]


class SaleMode:
    PCT = "pct"
    TOPUP = "topup"


class FirstNegativeStatus:
    NONE = "none"
    CLEARED = "cleared"
    NEW = "new"
    UNCHANGED = "unchanged"
    LATER = "later"
    SOONER = "sooner"


class ChangeKind:
    # === Structured scenario changes ===
    ADD = "transaction_add"
    REMOVE = "transaction_remove"
    MODIFY = "transaction_modify"
    BULK_ADJUST = "bulk_adjustment"  # percent on entries matching category/direction
    INCOME_ADJUST = "income_adjust"
    EXPENSE_ADJUST = "expense_adjust"
    SETTING_OVERRIDE = "setting_override"

    @classmethod
    def all_kinds(cls) -> list[str]:
        return [
            cls.ADD,
            cls.REMOVE,
            cls.MODIFY,
            cls.BULK_ADJUST,
            cls.INCOME_ADJUST,
            cls.EXPENSE_ADJUST,
            cls.SETTING_OVERRIDE,
        ]
