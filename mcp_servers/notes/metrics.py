"""Prometheus metrics for the Notes MCP server.

All metric objects are defined here so they can be imported from any module.
"""

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# Operation metrics
# ---------------------------------------------------------------------------

OPERATION_INVOCATIONS = Counter(
    "notes_operation_invocations_total",
    "Total number of operation invocations",
    ["operation", "status"],
)

OPERATION_DURATION = Histogram(
    "notes_operation_duration_seconds",
    "Duration of operation invocations in seconds",
    ["operation"],
    buckets=(0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0),
)

# ---------------------------------------------------------------------------
# View and template metrics
# ---------------------------------------------------------------------------

VIEW_READS = Counter(
    "notes_view_reads_total",
    "Total number of view reads",
    ["uri", "status"],
)

TEMPLATE_RENDERS = Counter(
    "notes_template_renders_total",
    "Total number of template renders",
    ["name", "status"],
)

# ---------------------------------------------------------------------------
# Store metrics
# ---------------------------------------------------------------------------

NOTES_STORED = Gauge(
    "notes_stored",
    "Number of notes currently held in memory",
)
