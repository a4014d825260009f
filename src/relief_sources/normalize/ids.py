import hashlib


def stable_source_id(postal_code: str, name: str) -> str:
    """Derive a repeatable identifier for results that carry no upstream id.

    The same (postal code, name) pair always maps to the same id, so a
    re-run of an LLM search upserts the existing row instead of adding one.
    """
    key = f"{postal_code.strip()}|{' '.join(name.lower().split())}"
    return hashlib.sha1(key.encode()).hexdigest()[:20]
