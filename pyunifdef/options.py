from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pyunifdef.errors import ConfigurationError


@dataclass(frozen=True)
class Settings:
    """Options that fully determine the shape of the resolver output.

    - compress_blanks: collapse blank lines left next to deleted lines
    - blank_placeholders: emit an empty line for every deleted line
    - complement: keep what would be dropped and drop what would be kept
    - debug: annotate the output with /*...*/ trace comments
    - permit_obfuscated: pass multi-line directives through instead of failing
    - strict_logic: no short-circuit of || and && over unknown operands
    - force_constant_unresolved: leave #if lines with constant expressions alone
    - line_markers: emit #line after runs of deleted lines
    - symbol_list: list the symbols used in directives instead of the source
    - symbol_depth: prefix each listed directive with its nesting depth
    - passthrough_text: treat everything as code, no comment/literal parsing
    - line_file: file name used in #line markers
    """
    compress_blanks: bool = False
    blank_placeholders: bool = False
    complement: bool = False
    debug: bool = False
    permit_obfuscated: bool = False
    strict_logic: bool = False
    force_constant_unresolved: bool = False
    line_markers: bool = False
    symbol_list: bool = False
    symbol_depth: bool = False
    passthrough_text: bool = False
    line_file: Optional[str] = None

    def validate(self) -> None:
        if self.compress_blanks and self.blank_placeholders:
            raise ConfigurationError(
                "compressing blank lines and blank placeholder lines are mutually exclusive"
            )

    @property
    def listing(self) -> bool:
        return self.symbol_list or self.symbol_depth
