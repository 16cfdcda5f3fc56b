"""
Error Log Model
Stores unhandled server errors for debugging.

Captures:
- Timestamp and severity
- User context
- Request details
- Full error traceback
- Additional (sanitised) context data
"""

from sqlalchemy import Column, String, Text, JSON, DateTime, Integer

from bakebook.models.base import BaseModel, utcnow


class ErrorLog(BaseModel):
    """
    Error Log Model

    Each row is identified by an opaque error_id that is returned to the
    client in the 500 response body, so a report can be matched to its log.
    """
    __tablename__ = "error_logs"

    error_id = Column(String(36), unique=True, nullable=False, index=True)

    timestamp = Column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
        index=True
    )

    # Error classification
    error_type = Column(String(255), nullable=False, index=True)  # e.g., "ValueError"
    error_code = Column(String(50), nullable=True)  # HTTP status code if any
    severity = Column(String(20), default="error", nullable=False)

    # Location info
    module = Column(String(255), nullable=True)
    function = Column(String(255), nullable=True)
    line_number = Column(String(20), nullable=True)

    # User context (nullable for unauthenticated requests)
    user_id = Column(Integer, nullable=True, index=True)
    username = Column(String(150), nullable=True)

    # Request context
    request_method = Column(String(10), nullable=True)
    request_path = Column(String(500), nullable=True)
    request_query = Column(Text, nullable=True)
    client_ip = Column(String(50), nullable=True)
    user_agent = Column(String(500), nullable=True)

    # Error details
    message = Column(Text, nullable=False)
    stack_trace = Column(Text, nullable=True)
    context_data = Column(JSON, nullable=True)

    def __repr__(self):
        return f"<ErrorLog(error_id={self.error_id}, type={self.error_type}, message={self.message[:50]}...)>"
