"""Walk-through: profile a small object graph at several depths.

Run with ``python examples/demo.py`` after installing the package.
"""

import membuddy.api
from membuddy.colors import ANSI_THEME
from membuddy.options import UNBOUNDED


def create_test_data() -> dict:
    data = {
        "small_string": "hello world",
        "number": 12345,
        "boolean": True,
        "nested": {"level1": {"level2": {"level3": {"level4": "deeply nested value"}}}},
        "array": [f"item {i}" for i in range(1, 1001)],
        "string_keys": {f"key_{i}": f"value_{i}" for i in range(1, 101)},
    }
    parent = {"name": "parent"}
    parent["child"] = {"name": "child", "parent": parent}
    data["circular"] = parent
    data["circular_ref"] = parent
    return data


def main() -> None:
    data = create_test_data()
    with membuddy.api.create() as profiler:
        for depth in (2, 3, UNBOUNDED):
            print(f"\nProfile with max_depth={depth}:")
            result = profiler.profile(target=data, max_depth=depth)
            profiler.render(result, theme=ANSI_THEME, top=10)

        print("\nSame result, every row, no header:")
        profiler.render(result, theme=ANSI_THEME, top=False, no_header=True, min_size=64)


if __name__ == "__main__":
    main()
