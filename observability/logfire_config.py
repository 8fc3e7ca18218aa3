"""
Logfire configuration and initialization.

Logfire provides structured logging and tracing for the sequence generation
pipeline: every step, every model-call attempt and every API handler runs
inside a span.

Environment Variables:
    LOGFIRE_TOKEN: Logfire project token (optional; logs stay local without it)
    ENVIRONMENT: deployment environment (development, staging, production)
"""
import os
from typing import Optional

import logfire


class LogfireConfig:
    """
    Logfire configuration singleton.

    Ensures Logfire is initialized only once. Without a token the
    application still logs, it just does not ship events to Logfire.
    """

    _initialized = False

    @classmethod
    def initialize(cls, token: Optional[str] = None) -> None:
        """
        Initialize Logfire with project token.

        Args:
            token: Logfire project token (or set LOGFIRE_TOKEN env var)
        """
        if cls._initialized:
            return

        token = token or os.getenv("LOGFIRE_TOKEN")

        logfire.configure(
            token=token or None,
            service_name="outreach-sequencer",
            environment=os.getenv("ENVIRONMENT", "development"),
            send_to_logfire=bool(token),
        )

        # Model calls show up as child spans of the executor attempts
        logfire.instrument_openai()

        cls._initialized = True

    @classmethod
    def is_initialized(cls) -> bool:
        """
        Check if Logfire has been initialized.

        Returns:
            True if initialized, False otherwise
        """
        return cls._initialized
