from __future__ import annotations

import re


DOC_START_PATTERN = re.compile(r"^---(?:\s|$)")
DOC_END_PATTERN = re.compile(r"^\s*\.\.\.\s*$")
MARKER_TAG_PATTERN = re.compile(r"^---\s+!(?P<tag>[A-Za-z]+)\b")

# Discriminator field injected by the tag constructors and the marker-line fallback.
REMARK_TYPE_FIELD = "RemarkType"

PASS_FIELD = "Pass"
FUNCTION_FIELD = "Function"
DEBUG_LOC_FIELD = "DebugLoc"
ARGS_FIELD = "Args"
NAME_FIELD = "Name"

INSTRUCTION_COUNT_NAME = "InstructionCount"
STACK_SIZE_NAME = "StackSize"
NUM_INSTRUCTIONS_ARG = "NumInstructions"
NUM_STACK_BYTES_ARG = "NumStackBytes"
