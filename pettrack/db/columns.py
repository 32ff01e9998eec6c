from sqlalchemy import Column, DateTime


def utc_datetime(index: bool = False, nullable: bool = False) -> Column:
    """Timestamp column that stores timezone-aware UTC values."""
    return Column(DateTime(timezone=True), nullable=nullable, index=index)
