# =============================================================================
# core/errors.py  -  Error Taxonomy
# =============================================================================
#
# Every failure the advisor can raise on purpose lives here.  Two families:
#
#   CONTRACT VIOLATIONS (fail fast, surfaced to the caller):
#     - InvalidArgument   bad capacity, bad day count, unparseable date
#     - DataMismatch      weather and crowd series cover different dates
#
#   DEGRADABLE FAILURES (caught by the pipeline, replaced by a fallback):
#     - OracleUnavailable       LLM overloaded/down, retried against alternates
#     - OracleMalformed         LLM reply fails schema validation, not retried
#     - UpstreamDataUnavailable weather provider failed, synthetic series used
#
# InvalidArgument and DataMismatch also subclass ValueError so callers that
# only know the builtin hierarchy still catch them.
# =============================================================================


class AdvisorError(Exception):
    """Base class for every error raised by the visit-date advisor."""


class InvalidArgument(AdvisorError, ValueError):
    """An input violates the operation's contract (e.g. capacity <= 0)."""


class DataMismatch(AdvisorError, ValueError):
    """Weather and crowd series do not describe the same set of dates."""


class OracleError(AdvisorError):
    """The external recommendation oracle failed.

    Raised directly for failures that are not worth retrying (bad request,
    authentication, unknown model).  The pipeline treats every OracleError
    as a signal to use the deterministic scorer instead.
    """


class OracleUnavailable(OracleError):
    """Every oracle in the preference list was overloaded or unreachable."""


class OracleMalformed(OracleError):
    """The oracle replied, but the reply is not a valid RecommendationSet."""


class UpstreamDataUnavailable(AdvisorError):
    """The weather provider could not deliver a forecast."""
