"""Scripted dialogue used when no live model is configured, and as its fallback.

The stage is derived from the number of user turns only. Message content is
never inspected.
"""

from __future__ import annotations

from typing import Sequence

from dialogue.models import ChatMessage


SCRIPT_VERSION = "2"

REVEAL_AFTER = 5

CANNED_PROMPTS = (
    "تمام… خلّني أتأكد إني فاهمك صح.\nالإحساس هذا متى بدأ معك تقريبًا؟",
    "على مقياس من 1 إلى 10… قد إيش مأثر عليك هالشي؟",
    "تتذكر وش أول شي خلّى الإحساس يزيد؟\nموقف؟ كلمة؟ ضغط؟",
    "لو بنفصلها… وش اللي يوجع أكثر:\nالشعور نفسه؟ ولا السبب اللي وراه؟",
    "بسألك بصراحة وبهدوء…\nتحس إنك عارف وش المفروض تسوي،\nبس متردد تسويه؟",
)

FINAL_REVEAL = """مشكلتك مو التعب والضغط

مشكلتك إنك شايل أكثر من طاقتك
وتحاول تكمل بدون ما توقف

من كلامك واضح إنك متعود تتحمل
حتى وأنت متعب

ما تحتاج تغيّر كل شي
بس انتبه لهالنقطة:
لا تكمل تعطي بدون ما توقف

خذ راحتك بجد
مو بالكلام
بالفعل

إذا حاب ترجع… بيني وبينك موجود"""


def count_user_turns(messages: Sequence[ChatMessage]) -> int:
    return sum(1 for m in messages if m.role == "user")


def stage_index(messages: Sequence[ChatMessage]) -> int:
    """Return the stage for a transcript; `len(CANNED_PROMPTS)` means the reveal."""

    n = count_user_turns(messages)
    if n >= REVEAL_AFTER:
        return len(CANNED_PROMPTS)
    return min(max(n - 1, 0), len(CANNED_PROMPTS) - 1)


def resolve_reply(messages: Sequence[ChatMessage]) -> str:
    """Pick the next scripted utterance for `messages`."""

    index = stage_index(messages)
    if index >= len(CANNED_PROMPTS):
        return FINAL_REVEAL
    return CANNED_PROMPTS[index]
