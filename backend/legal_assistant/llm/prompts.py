"""System prompts for the generation service."""

from backend.legal_assistant.models.common import Category

BASE_SYSTEM_PROMPTS = {
    "ar": """أنت مساعد قانوني متخصص في القانون الأردني. مهمتك تقديم معلومات قانونية دقيقة ومفيدة باللغة العربية.

التوجيهات:
1. اعتمد على الوثائق القانونية المرفقة قبل أي مصدر آخر
2. اذكر أرقام المواد والقوانين ذات الصلة عند الإمكان
3. استخدم لغة عربية فصحى واضحة
4. إذا لم تكن متأكداً من معلومة فاذكر ذلك صراحة
5. قدم معلومات قانونية عامة وليس استشارة قانونية شخصية""",
    "en": """You are a legal assistant specialised in Jordanian law. Give accurate, useful legal information.

Guidelines:
1. Rely on the attached legal documents before anything else
2. Cite article numbers and law names where possible
3. Say so explicitly when you are not sure about something
4. Give general legal information, not personal legal advice
5. Do NOT invent articles, penalties or law numbers that are not in the documents""",
}

_CATEGORY_HEADERS = {
    "ar": "تعليمات خاصة لفئة {category}:",
    "en": "Specific instructions for {category}:",
}

_CONTEXT_HEADERS = {
    "ar": "الوثائق ذات الصلة:",
    "en": "Relevant documents:",
}


def build_system_prompt(
    category: Category | None,
    instructions: dict[str, str] | None = None,
    language: str = "ar",
) -> str:
    """Base prompt plus the configured instruction for ``category``, if any."""
    prompt = BASE_SYSTEM_PROMPTS[language]
    if category is None or not instructions:
        return prompt

    instruction = instructions.get(category.value)
    if not instruction:
        return prompt

    header = _CATEGORY_HEADERS[language].format(category=category.value)
    return f"{prompt}\n\n{header}\n{instruction}"


def compose_system_message(system_prompt: str, context: str, language: str = "ar") -> str:
    """System message sent to the model: prompt followed by retrieved context."""
    if not context:
        return system_prompt
    return f"{system_prompt}\n\n{_CONTEXT_HEADERS[language]}\n{context}"
