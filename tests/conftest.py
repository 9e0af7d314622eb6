"""
Pytest configuration and fixtures
"""
import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


@pytest.fixture
def duration_records():
    """Duration-form records: MAIN 160, MEM 70, ARITH 30 (total 260 ns)."""
    return [
        {"name": "MAIN_setup", "start": 0, "duration": 100},
        {"name": "MEM_load", "start": 100, "duration": 50, "addr": "0x10"},
        {"name": "ARITH_add", "start": 150, "duration": 30},
        {"name": "MEM_load", "start": 180, "duration": 20},
        {"name": "MAIN_teardown", "start": 200, "end": 260},
    ]


@pytest.fixture
def sample_trace(duration_records):
    """Normalized trace built from duration_records."""
    from tracetimeline.parsing import normalize

    return normalize(duration_records)


@pytest.fixture
def event_payload():
    """Compact event stream with two tasks, one left open."""
    return {
        "h": 1000,
        "t": ["ROM_fetch", "HASHFN_round"],
        "c": ["#112233", "#445566"],
        "d": [
            [0, 0, 0],
            [1, 0, 5],
            [0, 1, 20],
            [0, 0, 30],
            [0, 1, 45],
            [1, 0, 60],
        ],
    }


@pytest.fixture
def csv_text():
    """Tabular events with two cores and one broken row."""
    return (
        "timestamp,task_name,action,core_id,file_source\n"
        "0,MEM_read,begin,0,a.log\n"
        "5,MEM_read,begin,1,a.log\n"
        "10,MEM_read,end,0,a.log\n"
        "12,ARITH_mul,begin,0,b.log\n"
        "20,MEM_read,end,1,a.log\n"
        "bad,ARITH_mul,end,0,b.log\n"
        "30,ARITH_mul,end,0,b.log\n"
    )
