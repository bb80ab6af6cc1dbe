"""
Fixed registry and database rules.

This file exists to make the registry contract explicit and enforceable.
"""

SOURCE_URL = "https://www.iana.org/assignments/epp-repository-ids/epp-repository-ids-1.csv"
SOURCE_ENCODING = "utf-8"

EXPECTED_HEADER = (
    "EPP Repository ID",
    "Change Controller",
    "Reference/Contact",
    "Registration Date",
)

MAX_ID_LENGTH = 8  # Unicode scalar values, not bytes

TOOL_NAME = "update-epp-repo-ids"
DATA_SUBDIR = "epp-repo-ids"
DATABASE_FILENAME = "epp-repo-ids.txt"
DATABASE_ENCODING = "utf-8"
END_OF_FILE = "# END-OF-FILE"

FETCH_TIMEOUT_SECONDS = 20 * 60
