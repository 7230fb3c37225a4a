"""Tag name helpers shared by the parser, auras and targeting"""

_IRREGULAR_PLURALS = {
    'elves': 'elf',
    'dwarves': 'dwarf',
    'wolves': 'wolf',
    'undead': 'undead',
}


def singularize(word: str) -> str:
    """Turn a plural tag as written in ability text into its tag name (lowercase)."""
    w = word.strip().lower()
    if w in _IRREGULAR_PLURALS:
        return _IRREGULAR_PLURALS[w]
    if w.endswith('ies') and len(w) > 3:
        return w[:-3] + 'y'
    if w.endswith('s') and not w.endswith('ss'):
        return w[:-1]
    return w


def has_tag(unit, tag: str) -> bool:
    wanted = singularize(tag)
    return any(t.lower() == wanted or t.lower() == tag.lower() for t in getattr(unit, 'tags', ()))
