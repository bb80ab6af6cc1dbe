import sys

import pytest

from epp_repo_ids.logging import configure_logging

HEADER = "EPP Repository ID,Change Controller,Reference/Contact,Registration Date\n"

REGISTRY_CSV = (
    HEADER
    + '"MX, #x004D #x0058",Example Registry,[RFC5730],2020-01-01\n'
    + '"ENUMAT, #x0045 #x004E #x0055 #x004D #x0041",enum.at,[Contact],2020-01-02\n'
    + '"ABCDEFGHI, #x0041 #x0042 #x0043 #x0044 #x0045 #x0046 #x0047 #x0048 #x0049",Long,[x],2020-01-03\n'
    + '"Z\U0001F600, #x005A #x1F600",Emoji,[x],2020-01-04\n'
    + '"ÉTÉ, #x00C9 #x0054 #x00C9",Accented,[x],2020-01-05\n'
)


@pytest.fixture
def registry_bytes():
    return REGISTRY_CSV.encode("utf-8")


@pytest.fixture
def registry_file(tmp_path, registry_bytes):
    path = tmp_path / "registry.csv"
    path.write_bytes(registry_bytes)
    return path


@pytest.fixture(autouse=True)
def _diagnostics_to_real_stderr():
    yield
    configure_logging("INFO", stream=sys.__stderr__)
