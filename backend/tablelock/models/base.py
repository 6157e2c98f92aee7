import enum


class LockResult(str, enum.Enum):
    ok = "ok"
    invalid = "invalid"
    conflict = "conflict"
    not_found = "not_found"
    forbidden = "forbidden"
