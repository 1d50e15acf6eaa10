from bloginno.rules.loader import load_rules, parse_rules
from bloginno.rules.models import Rules

__all__ = ["Rules", "load_rules", "parse_rules"]
