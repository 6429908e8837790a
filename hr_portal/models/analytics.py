from pydantic import BaseModel


class StatusCounts(BaseModel):
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    total: int = 0


class ExpenseStats(StatusCounts):
    amount_approved: float = 0.0
    this_month: int = 0
    last_month: int = 0


class RequestStatsResponse(BaseModel):
    leave: StatusCounts
    expenses: ExpenseStats
    promotions: StatusCounts
