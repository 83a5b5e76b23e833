"""Application constants."""

USER_AGENT = "synthetic-api/1.0 (+dataset builder)"
DATASETS = (
    "hospitals",
    "ports",
    "airports",
)
COORDINATE_PRECISION = 6
ALL_FILENAME = "all.geojson"
METADATA_FILENAME = "metadata.json"
NOMATCH_FILENAME = "nomatch.json"
EXIT_SUCCESS = 0
EXIT_FAILURE = 1
JSON_LOG_FIELDS = (
    "timestamp",
    "run_id",
    "dataset",
    "stage",
    "event",
    "status",
    "feature_id",
    "attempt",
    "rows_in",
    "rows_out",
    "error_code",
    "message",
)
