"""Common nickname groups for first-name matching.

Each set contains interchangeable names: a full name and its common short
forms. Entries are lower case.
"""

from __future__ import annotations

DEFAULT_NICKNAME_GROUPS: list[set[str]] = [
    {"jose", "joseph", "joe", "joey", "pepe", "pepito"},
    {"juan", "john", "johnny", "jon", "jack"},
    {"maria", "ma", "mary", "mia"},
    {"francisco", "frank", "francis", "paco", "kiko"},
    {"antonio", "anthony", "tony", "tonyo"},
    {"roberto", "robert", "rob", "bob", "bobby", "berto"},
    {"ricardo", "richard", "rick", "ricky", "carding"},
    {"eduardo", "edward", "ed", "eddie", "edong"},
    {"manuel", "manny", "manolo", "noel"},
    {"rodrigo", "rod", "digong"},
    {"fernando", "fernan", "nando"},
    {"alfredo", "alfred", "fred", "freddie"},
    {"ernesto", "ernest", "ernie", "esto"},
    {"gregorio", "gregory", "greg", "goryo"},
    {"teresa", "theresa", "tess", "tessie"},
    {"elizabeth", "liza", "liz", "beth", "betty"},
    {"margarita", "margaret", "maggie", "marga", "margie"},
    {"rosario", "charo", "rosa", "rose"},
    {"concepcion", "connie", "concha"},
    {"consuelo", "connie", "suelo"},
    {"dolores", "lola", "lolita", "dolly"},
    {"guadalupe", "lupe", "lupita"},
    {"catherine", "katherine", "kathryn", "kate", "katie", "cathy"},
    {"michael", "mike", "mikey", "miguel"},
    {"william", "will", "bill", "billy", "willy"},
    {"james", "jim", "jimmy", "jaime"},
    {"christopher", "chris", "topher"},
    {"christine", "christina", "cristina", "tina", "chris"},
    {"daniel", "dan", "danny"},
    {"patricia", "pat", "patty", "trisha"},
    {"patrick", "pat", "patricio"},
    {"jennifer", "jen", "jenny"},
    {"jessica", "jess", "jessie"},
    {"rebecca", "becky", "becca"},
    {"samuel", "sam", "sammy"},
    {"benjamin", "ben", "benjie", "benny"},
    {"nicholas", "nick", "nico", "nicolas"},
    {"alexander", "alex", "alexandra", "sandra", "xander"},
]


def find_nickname_variations(name: str, groups: list[set[str]] | None = None) -> set[str]:
    """Return every name that shares a nickname group with name, excluding name itself.

    Args:
        name: First name to look up (any case)
        groups: Optional groups to use instead of DEFAULT_NICKNAME_GROUPS

    Returns:
        Set of lower-case variations (empty if name is in no group)
    """
    key = name.strip().lower()
    variations: set[str] = set()
    for group in groups if groups is not None else DEFAULT_NICKNAME_GROUPS:
        if key in group:
            variations |= group
    variations.discard(key)
    return variations
