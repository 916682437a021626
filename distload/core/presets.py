"""Predefined limits and defaults for splitting and sampling."""

# Hard ceilings; a script's _split block may request values up to these
SPLIT_CEILINGS = {
    "maxScriptDurationInSeconds": 518400,  # 6 days
    "maxScriptRequestsPerSecond": 50000,
    "maxChunkDurationInSeconds": 285,  # 4m45s, leaves room for the time buffer
    "maxChunkRequestsPerSecond": 500,
    "timeBufferInMilliseconds": 30000,
}

# Values used when the script's _split block is silent
SPLIT_DEFAULTS = {
    "maxScriptDurationInSeconds": 86400,  # 1 day
    "maxScriptRequestsPerSecond": 5000,
    "maxChunkDurationInSeconds": 240,
    "maxChunkRequestsPerSecond": 25,
    "timeBufferInMilliseconds": 15000,
}

SPLIT_MINIMUMS = {key: 1 for key in SPLIT_CEILINGS}

# Reserved before the platform kills a worker so a report can still be returned
TIMEOUT_BUFFER_IN_MILLISECONDS = 15000

# Sampling defaults per mode (performance scripts use the generic ones)
SAMPLING_DEFAULTS = {
    "size": 5,
    "averagePause": 0.2,
    "pauseVariance": 0.1,
    "errorBudget": 4,
    "warningThreshold": 0.9,
}

ACCEPTANCE_SAMPLING_DEFAULTS = {
    **SAMPLING_DEFAULTS,
    "size": 1,
    "errorBudget": 0,
}

MONITORING_SAMPLING_DEFAULTS = {
    **SAMPLING_DEFAULTS,
    "size": 5,
    "errorBudget": 4,
}

# Largest payload the remote invoke accepts, per invocation type
PAYLOAD_LIMITS = {
    "Event": 256 * 1024,
    "RequestResponse": 6 * 1024 * 1024,
}

# Field that names a YAML file to merge into an incoming event
MERGE_FIELD = ">>"

# Environment variables read by the CLI and the alerter
ENV_WORKER_URL = "DISTLOAD_WORKER_URL"
ENV_ALERT_WEBHOOK_URL = "DISTLOAD_ALERT_WEBHOOK_URL"
