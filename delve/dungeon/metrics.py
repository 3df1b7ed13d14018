from typing import Dict


def init_metrics() -> Dict[str, int | float | dict]:
    return {
        'rooms_attempted': 0,
        'rooms_placed': 0,
        'rects_remaining': 0,
        'rects_dropped': 0,
        'corridors_dug': 0,
        'dead_ends': 0,
        'doors_created': 0,
        'secret_doors': 0,
        'traps': 0,
        'fixtures': 0,
        'unreachable_rooms': 0,
        'runtime_ms': 0.0,
        'phase_ms': {},
    }
