# tests/helpers.py

import json
import os


def load_fixture(filename: str):
    path = os.path.join(os.path.dirname(__file__), "fixtures", filename)
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def make_match(date: int, winner=None, forfeited=False, completions=None, match_id=None) -> dict:
    """Raw match dict shaped like the user matches endpoint returns it."""
    match = {
        "id": match_id if match_id is not None else date,
        "date": date,
        "season": 6,
        "forfeited": forfeited,
        "result": {"uuid": winner, "time": None} if winner is not None else None,
    }
    if completions is not None:
        match["completions"] = [{"uuid": uuid, "time": time} for uuid, time in completions]
    return match
