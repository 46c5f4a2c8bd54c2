"""
Test fixtures for the lineage engine.

This module provides sample job records shaped like platform API
responses, covering the graph shapes the engine must handle.
"""

# Linear pipeline: d1 -> j1 -> d2 -> j2 -> d3
PIPELINE_RECORDS = [
    {
        "id": "j1",
        "name": "Transform Customer Data",
        "status": "SUCCESS",
        "owner": "John Doe",
        "executionCount": 100,
        "successRate": 0.95,
        "inputs": [{"id": "d1", "name": "Raw Customer Data"}],
        "outputs": [{"id": "d2", "name": "Cleaned Customer Data"}],
    },
    {
        "id": "j2",
        "name": "Generate Customer Report",
        "status": "SUCCESS",
        "inputs": [{"id": "d2", "name": "Cleaned Customer Data"}],
        "outputs": [{"id": "d3", "name": "Customer Report"}],
    },
]

# One job with two inputs and two outputs
MULTI_IO_RECORDS = [
    {
        "id": "join",
        "name": "Join Data Sources",
        "inputs": [
            {"id": "src_a", "name": "Source A"},
            {"id": "src_b", "name": "Source B"},
        ],
        "outputs": [
            {"id": "joined", "name": "Joined Output"},
            {"id": "errors", "name": "Error Records"},
        ],
    },
]

# Two jobs sharing no entities
DISCONNECTED_RECORDS = [
    {
        "id": "job_a",
        "name": "Dataflow A",
        "inputs": [{"id": "a_in", "name": "Input A"}],
        "outputs": [{"id": "a_out", "name": "Output A"}],
    },
    {
        "id": "job_b",
        "name": "Dataflow B",
        "inputs": [{"id": "b_in", "name": "Input B"}],
        "outputs": [{"id": "b_out", "name": "Output B"}],
    },
]

# Two routes from src to out:
#   src -> left -> mid_a -> merge -> out
#   src -> right -> mid_b -> merge -> out
DIAMOND_RECORDS = [
    {
        "id": "left",
        "name": "Left Branch",
        "inputs": [{"id": "src", "name": "Source"}],
        "outputs": [{"id": "mid_a", "name": "Middle A"}],
    },
    {
        "id": "right",
        "name": "Right Branch",
        "inputs": [{"id": "src", "name": "Source"}],
        "outputs": [{"id": "mid_b", "name": "Middle B"}],
    },
    {
        "id": "merge",
        "name": "Merge",
        "inputs": [
            {"id": "mid_a", "name": "Middle A"},
            {"id": "mid_b", "name": "Middle B"},
        ],
        "outputs": [{"id": "out", "name": "Output"}],
    },
]

# c1 -> loop1 -> c2 -> loop2 -> c1
CYCLIC_RECORDS = [
    {
        "id": "loop1",
        "name": "Circular Flow 1",
        "inputs": [{"id": "c1", "name": "Dataset C1"}],
        "outputs": [{"id": "c2", "name": "Dataset C2"}],
    },
    {
        "id": "loop2",
        "name": "Circular Flow 2",
        "status": "FAILED",
        "inputs": [{"id": "c2", "name": "Dataset C2"}],
        "outputs": [{"id": "c1", "name": "Dataset C1"}],
    },
]

QUOTED_RECORDS = [
    {
        "id": "quoted_job",
        "name": 'Dataflow with "quotes"',
        "inputs": [{"id": "quoted_data", "name": 'Dataset with "quotes"'}],
    },
]

# Mix of good and bad records: only "good" and "also_good" survive
MALFORMED_RECORDS = [
    {
        "id": "good",
        "name": "Good Job",
        "inputs": [
            {"id": "ok_in", "name": "OK Input"},
            {"name": "Entry without id"},
            "not-a-mapping",
        ],
        "outputs": [{"dataSourceId": "ok_out", "name": "Aliased Output"}],
    },
    {"name": "Record without id"},
    {"id": "   ", "name": "Blank id"},
    None,
    42,
    {"id": 7, "name": "Numeric id", "outputs": "not-a-list"},
    {"id": "also_good"},
]


def chain_records(length: int) -> list[dict]:
    """Build a linear chain ds0 -> df0 -> ds1 -> df1 -> ... -> ds<length>."""
    return [
        {
            "id": f"df{i}",
            "name": f"Dataflow {i}",
            "inputs": [{"id": f"ds{i}", "name": f"Dataset {i}"}],
            "outputs": [{"id": f"ds{i + 1}", "name": f"Dataset {i + 1}"}],
        }
        for i in range(length)
    ]
