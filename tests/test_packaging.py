from pathlib import Path

from setuptools import find_packages

ROOT = Path(__file__).resolve().parent.parent


def test_all_subpackages_are_discovered():
    packages = set(find_packages(where=str(ROOT), include=["journal_relay*"]))

    assert {"journal_relay", "journal_relay.clients", "journal_relay.utils"} <= packages
