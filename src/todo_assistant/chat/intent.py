"""Keyword-based intent detection for chat messages."""

import enum
import re


class Intent(enum.Enum):
    """What a chat message asks for."""

    CREATE = "create"
    MODIFY = "modify"
    DELETE = "delete"
    COMPLETE = "complete"
    SUMMARY = "summary"
    LIST = "list"
    UNKNOWN = "unknown"


# Checked in order; the first matching intent wins
INTENT_PATTERNS: tuple[tuple[Intent, re.Pattern[str]], ...] = (
    (
        Intent.CREATE,
        re.compile(
            r"创建任务|新建任务|加个任务|添加任务|新任务|\b(?:create|add|new)\s+(?:a\s+)?task\b",
            re.IGNORECASE,
        ),
    ),
    (
        Intent.MODIFY,
        re.compile(r"修改|更改|改一下|换个|改到|\b(?:change|modify|update|reschedule)\b", re.IGNORECASE),
    ),
    (Intent.DELETE, re.compile(r"删除|删掉|去掉|移除|\b(?:delete|remove)\b", re.IGNORECASE)),
    (
        Intent.COMPLETE,
        re.compile(r"完成|做完|结束|搞定|\b(?:complete|finish|done with)\b", re.IGNORECASE),
    ),
    (Intent.SUMMARY, re.compile(r"总结|概况|状态|\b(?:summary|summarize|status)\b", re.IGNORECASE)),
    (
        Intent.LIST,
        re.compile(r"任务列表|有哪些任务|列出任务|\b(?:list|show)\s+(?:my\s+)?tasks\b", re.IGNORECASE),
    ),
)

# Keyword removed from delete/complete messages to get the task title
_TARGET_KEYWORDS = {
    Intent.DELETE: re.compile(r"删除|删掉|去掉|移除|\b(?:delete|remove)\b", re.IGNORECASE),
    Intent.COMPLETE: re.compile(r"完成|做完|结束|搞定|\b(?:complete|finish|done with)\b", re.IGNORECASE),
}

_FILLER = re.compile(r"^(?:the\s+)?(?:task[\s:：]+)?|\s+task$|任务$", re.IGNORECASE)


def detect_intent(message: str) -> Intent:
    """Classify a chat message by keyword."""
    for intent, pattern in INTENT_PATTERNS:
        if pattern.search(message):
            return intent
    return Intent.UNKNOWN


def extract_target(message: str, intent: Intent) -> str:
    """Strip the first delete/complete keyword and return the remaining title fragment."""
    pattern = _TARGET_KEYWORDS.get(intent)
    if pattern is None:
        return message.strip()
    remainder = pattern.sub("", message, count=1).strip(" \t:：,，.。\"'「」")
    return _FILLER.sub("", remainder).strip()
