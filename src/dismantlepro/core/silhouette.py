from __future__ import annotations

import re
from dataclasses import dataclass

from dismantlepro.types import EquipmentType

CATERPILLAR = frozenset({"caterpillar", "cat"})


@dataclass(frozen=True, slots=True)
class Rule:
    """One heuristic. Every condition that is set must hold."""

    model: re.Pattern[str] | None = None
    makes: frozenset[str] = frozenset()
    contains: str | None = None
    excludes: tuple[str, ...] = ()

    def matches(self, make: str, model: str, combined: str) -> bool:
        if self.model is not None and not self.model.search(model):
            return False
        if self.makes and make not in self.makes:
            return False
        if self.contains is not None and self.contains not in combined:
            return False
        return not any(token in combined for token in self.excludes)


def _model(pattern: str, *makes: str) -> Rule:
    return Rule(model=re.compile(pattern), makes=frozenset(makes))


def _make(*makes: str) -> Rule:
    return Rule(makes=frozenset(makes))


def _text(token: str, *excludes: str) -> Rule:
    return Rule(contains=token, excludes=excludes)


def _cat(pattern: str) -> Rule:
    return Rule(model=re.compile(pattern), makes=CATERPILLAR)


# Order matters: a category listed earlier shadows later ones.
RULES: tuple[tuple[EquipmentType, tuple[Rule, ...]], ...] = (
    (
        "excavator",
        (
            _model(r"^3[0-9]{2}"),
            _model(r"^zx[0-9]"),
            _model(r"^pc[0-9]"),
            _model(r"^ec[0-9]"),
            _model(r"^cx[0-9]"),
            _model(r"^sk[0-9]"),
            _model(r"^js[0-9]"),
            _model(r"^hx[0-9]"),
            _model(r"^dx[0-9]"),
            _model(r"^r[0-9]{3}", "liebherr"),
            _model(r"^e[0-9]", "bobcat"),
            _model(r"^tb[0-9]"),
            _model(r"^kx[0-9]"),
            _model(r"^u[0-9]", "kubota"),
            _model(r"^vio[0-9]"),
            _model(r"^sy[0-9]"),
            _model(r"^ez[0-9]"),
            _model(r"^sh[0-9]"),
            _text("excavator"),
            _make("link-belt", "ihi", "gradall", "sennebogen"),
        ),
    ),
    (
        "wheel_loader",
        (
            _cat(r"^9[0-9]{2}"),
            _model(r"^wa[0-9]"),
            _model(r"^l[0-9]", "volvo"),
            _model(r"^[0-9]+k$", "john deere"),
            _model(r"^hl[0-9]"),
            _model(r"^dl[0-9]"),
            _model(r"^l5[0-9]", "liebherr"),
            _text("wheel loader"),
            _text("loader", "track", "skid"),
        ),
    ),
    (
        "bulldozer",
        (
            _model(r"^d[5-9]$"),
            _model(r"^d[5-9][a-z]"),
            _model(r"^d1[0-1]"),
            _model(r"^d[0-9]", "komatsu"),
            _model(r"^[0-9]+m$", "case"),
            _text("dozer"),
        ),
    ),
    (
        "compact_track_loader",
        (
            _cat(r"^2[0-9]{2}d3?$"),
            _model(r"^t[0-9]", "bobcat"),
            _model(r"^tr[0-9]"),
            _model(r"^3[1-3][0-9]g$", "john deere"),
            _model(r"^svl[0-9]"),
            _model(r"^tl[0-9]", "takeuchi"),
            _model(r"^rt", "asv", "mustang"),
            _model(r"^c[0-9]", "new holland"),
            _text("track loader"),
            _text("ctl"),
        ),
    ),
    (
        "skid_steer",
        (
            _model(r"^s[0-9]", "bobcat"),
            _model(r"^sv[0-9]", "case"),
            _model(r"^ssv[0-9]"),
            _model(r"^l[0-9]", "new holland"),
            _model(r"^[rv][0-9]", "gehl"),
            _text("skid steer"),
            _text("skid-steer"),
        ),
    ),
    (
        "telehandler",
        (
            _model(r"^g[0-9]", "jlg"),
            _model(r"^gth"),
            _model(r"^mt[0-9]", "manitou"),
            _model(r"^th[0-9]"),
            _text("telehandler"),
            _text("reach forklift"),
        ),
    ),
    (
        "backhoe",
        (
            _model(r"^4[0-9]{2}f"),
            _model(r"^4[0-9]{2}xe"),
            _cat(r"^440"),
            _model(r"^5[89][0-9]"),
            _model(r"^[3-5]cx"),
            _model(r"^[34][0-9]{2}[ls]", "john deere"),
            _model(r"^b[0-9]", "new holland"),
            _text("backhoe"),
        ),
    ),
    (
        "dump_truck",
        (
            _cat(r"^7[234][05]$"),
            _model(r"^a[234][05]", "volvo"),
            _model(r"^hm[0-9]"),
            _model(r"^b[234][05]", "bell"),
            _text("dump truck"),
            _text("articulated"),
            _text("adt"),
        ),
    ),
    (
        "motor_grader",
        (
            _model(r"^1[246]0$"),
            _model(r"^1[246][0-9][a-z]"),
            _model(r"^gd[0-9]"),
            _model(r"^6[0-9]{2}g$", "john deere"),
            _text("grader"),
        ),
    ),
    (
        "roller",
        (
            _model(r"^c[bsc][0-9]"),
            _make("hamm", "dynapac", "bomag", "sakai"),
            _model(r"^[ds]d[0-9]", "volvo"),
            _text("roller"),
            _text("compactor"),
        ),
    ),
    (
        "forklift",
        (
            _text("forklift"),
            _text("fork lift"),
            _make("hyster", "yale", "crown", "toyota forklift"),
        ),
    ),
    (
        "crane",
        (
            _text("crane"),
            _make("grove", "tadano", "manitowoc"),
            _model(r"^lt[mr]"),
        ),
    ),
)


def detect_equipment_type(make: str, model: str) -> EquipmentType:
    make_lower = (make or "").strip().lower()
    model_lower = (model or "").strip().lower()
    combined = f"{make_lower} {model_lower}"

    for equipment_type, rules in RULES:
        if any(rule.matches(make_lower, model_lower, combined) for rule in rules):
            return equipment_type
    return "other"
