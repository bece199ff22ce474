"""
Prompt builders for the Gemini-backed announcement checks.
"""

GUIDELINE_CATEGORIES = (
    "No hate speech, discrimination, or offensive content",
    "No misleading claims or scams",
    "No explicit content",
    "No personal information",
    "Relevant to crypto/blockchain topics",
)


def validation_prompt(title: str, content: str) -> str:
    guidelines = "\n".join(
        f"{i}. {rule}" for i, rule in enumerate(GUIDELINE_CATEGORIES, start=1)
    )
    return (
        "You are an AI validator for crypto announcements. "
        "Evaluate if the following announcement follows community guidelines:\n"
        f"{guidelines}\n\n"
        f"Announcement Title: {title}\n"
        f"Announcement Content: {content}\n\n"
        "Respond with a JSON object containing:\n"
        '1. "isValid": boolean (true if passes all guidelines)\n'
        '2. "score": number between 0 and 1 indicating confidence\n'
        '3. "issues": array of strings with specific issues found (empty if none)\n'
        '4. "feedback": detailed constructive feedback explaining your evaluation, '
        "including both strengths and areas for improvement"
    )


def enhancement_prompt(title: str, content: str) -> str:
    return (
        "You are an expert copywriter specializing in crypto and blockchain announcements.\n\n"
        f'Here is a title that needs improvement: "{title}"\n'
        f'Here is content that needs improvement: "{content}"\n\n'
        "Enhance the title and content to make them more engaging, professional, "
        "and impactful for a crypto audience. Keep the same general meaning and key "
        "information, but improve the writing quality, clarity, and persuasiveness.\n\n"
        "Respond in the following JSON format ONLY:\n"
        "{\n"
        '  "enhancedTitle": "The improved title",\n'
        '  "enhancedContent": "The improved content",\n'
        '  "improvements": ["A specific improvement you made", "..."]\n'
        "}"
    )
