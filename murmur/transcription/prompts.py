"""System instructions and prompt formatting for text cleanup."""

from typing import Optional

from ..models.transcription import CleanupMode

BASIC_INSTRUCTION = (
    "You clean up transcribed speech. Output ONLY the cleaned text - no explanations, "
    "no commentary, no annotations. Remove filler words (um, uh, like, you know), "
    "fix grammar, and improve clarity while preserving meaning."
)

SYSTEM_INSTRUCTIONS = {
    CleanupMode.BASIC: BASIC_INSTRUCTION,
    CleanupMode.FORMAL: (
        "You are a professional editor. Output ONLY the transformed text - no explanations, "
        "no commentary, no annotations. Transform transcribed speech into formal, polished "
        "prose suitable for business communication."
    ),
    CleanupMode.CASUAL: (
        "You clean up transcribed speech. Output ONLY the cleaned text - no explanations, "
        "no commentary, no annotations. Fix grammar and remove filler words while keeping "
        "a casual, conversational tone."
    ),
}

# Phi-3 instruct turn markers
END_OF_TURN = "<|end|>"
PROMPT_TEMPLATE = "<|system|>{system}" + END_OF_TURN + "\n<|user|>{text}" + END_OF_TURN + "\n<|assistant|>"


def system_instruction(mode, custom_prompt: Optional[str] = None) -> str:
    """Pick the system instruction for a mode.

    Custom mode uses the caller's prompt verbatim and falls back to the basic
    instruction when it is empty. Unknown modes behave like basic.
    """
    mode = CleanupMode.parse(mode)
    if mode is CleanupMode.CUSTOM:
        return custom_prompt if custom_prompt else BASIC_INSTRUCTION
    return SYSTEM_INSTRUCTIONS[mode]


def build_cleanup_prompt(text: str, mode, custom_prompt: Optional[str] = None) -> str:
    return PROMPT_TEMPLATE.format(system=system_instruction(mode, custom_prompt), text=text)
