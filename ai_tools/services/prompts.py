"""Prompt templates for the generators.

Every builder is a pure function of its (already validated) input: the same
request always produces byte-identical text.  Language is the only branch;
invalid languages never get this far because the request schemas reject them.
"""

from __future__ import annotations

import json

from pydantic import BaseModel

from ai_tools.schemas.knowledge import OutlineRequest, QuestionRequest

# ---------------------------------------------------------------------------
# Localised labels
# ---------------------------------------------------------------------------

_LEVEL_TEXT_ZH: dict[str, str] = {
    "beginner": "初学者",
    "intermediate": "中级",
    "advanced": "高级",
}

_QUESTION_TYPE_TEXT: dict[str, dict[str, str]] = {
    "en": {
        "single_choice": "single choice",
        "multiple_choice": "multiple choice",
        "fill": "fill in the blank",
        "essay": "essay",
        "mixed": "a mix of different types",
    },
    "zh": {
        "single_choice": "单选题",
        "multiple_choice": "多选题",
        "fill": "填空题",
        "essay": "问答题",
        "mixed": "混合题型",
    },
}

_DIFFICULTY_TEXT: dict[str, dict[str, str]] = {
    "en": {
        "easy": "easy",
        "medium": "medium",
        "hard": "hard",
        "mixed": "mixed difficulty levels",
    },
    "zh": {
        "easy": "简单",
        "medium": "中等",
        "hard": "困难",
        "mixed": "混合难度",
    },
}


def schema_instructions(schema: type[BaseModel]) -> str:
    """Return the instruction block asking for JSON matching *schema*."""
    schema_json = json.dumps(
        schema.model_json_schema(by_alias=True), ensure_ascii=False, indent=2, sort_keys=True
    )
    return (
        "Respond with a single JSON object that strictly follows this JSON schema.\n"
        "Output valid JSON only: no markdown fences, no commentary.\n"
        f"```json\n{schema_json}\n```"
    )


# ---------------------------------------------------------------------------
# Outline
# ---------------------------------------------------------------------------


def build_outline_prompt(request: OutlineRequest) -> str:
    """Build the outline instruction for *request*.

    Uses content, target audience, difficulty level, estimated duration,
    depth and the include-examples flag.
    """
    topic = request.content
    level = request.difficulty_level

    if request.language == "en":
        examples = (
            "- Include specific learning points and a concrete example for each knowledge area\n"
            if request.include_examples
            else ""
        )
        return (
            f'Create a comprehensive learning outline for the topic: "{topic}"\n'
            "\n"
            "Requirements:\n"
            f"- Target audience: {request.target_audience}\n"
            f"- Learner level: {level}\n"
            f"- Total study time to plan for: {request.estimated_duration}\n"
            f"- Generate {request.depth} main topics with detailed subtopics\n"
            "- Each topic should include:\n"
            "  - A clear, descriptive title\n"
            "  - Brief description of what will be learned\n"
            "  - Key learning points (3-5 points per topic)\n"
            "  - Estimated learning time\n"
            f"{examples}"
            "\n"
            "Please structure the content logically from basic concepts to advanced applications.\n"
            "Ensure each topic builds upon previous knowledge and provides a clear learning progression.\n"
            "\n"
            f'Generate a well-structured learning outline that helps learners systematically master "{topic}".'
        )

    examples = "- 在每个知识点中包含具体的学习要点和示例\n" if request.include_examples else ""
    return (
        f'请为知识主题"{topic}"创建一个完整的学习大纲。\n'
        "\n"
        "要求：\n"
        f"- 目标受众：{request.target_audience}\n"
        f"- 学习者水平：{_LEVEL_TEXT_ZH[level]}\n"
        f"- 预计总学习时长：{request.estimated_duration}\n"
        f"- 生成{request.depth}个主要知识点，包含详细的子主题\n"
        "- 每个知识点应该包含：\n"
        "  - 清晰、描述性的标题\n"
        "  - 简要说明将要学习的内容\n"
        "  - 关键学习要点（每个主题3-5个要点）\n"
        "  - 预估学习时间\n"
        f"{examples}"
        "\n"
        "请按照从基础概念到高级应用的逻辑顺序组织内容。\n"
        "确保每个主题都建立在先前知识的基础上，提供清晰的学习进程。\n"
        "\n"
        f'生成一个结构良好的学习大纲，帮助学习者系统地掌握"{topic}"。'
    )


# ---------------------------------------------------------------------------
# Questions
# ---------------------------------------------------------------------------


def _describe_types(request: QuestionRequest, language: str) -> str:
    labels = _QUESTION_TYPE_TEXT[language]
    separator = ", " if language == "en" else "、"
    return separator.join(labels[t] for t in request.question_types)


def build_question_prompt(request: QuestionRequest) -> str:
    """Build the quiz instruction for *request*.

    Uses content, question types, count, difficulty and the outline id.
    """
    language = request.language

    if language == "en":
        outline_line = (
            f"- Related outline id: {request.outline_id}\n" if request.outline_id else ""
        )
        return (
            f"Based on the following learning content, generate {request.count} practice questions.\n"
            "\n"
            "Content to create questions from:\n"
            f"{request.content}\n"
            "\n"
            "Requirements:\n"
            f"- Question types: {_describe_types(request, 'en')}\n"
            f"- Difficulty level: {_DIFFICULTY_TEXT['en'][request.difficulty]}\n"
            f"- Total questions: exactly {request.count}\n"
            f"{outline_line}"
            "\n"
            "For each question, provide:\n"
            "- A unique ID\n"
            "- Question type (single_choice, multiple_choice, fill, or essay)\n"
            "- Clear question title/text\n"
            "- Answer options (for choice questions, empty array for others)\n"
            "- Correct answer\n"
            "- Detailed explanation of the answer\n"
            "\n"
            "Question Type Guidelines:\n"
            "- single_choice: One correct answer from 4 options\n"
            "- multiple_choice: Multiple correct answers from 4-6 options\n"
            "- fill: Fill-in-the-blank format with blanks marked as ___\n"
            "- essay: Open-ended questions requiring detailed responses\n"
            "\n"
            "Ensure questions test understanding of the key concepts from the provided content.\n"
            "Generate diverse questions that cover different aspects of the material."
        )

    outline_line = f"- 关联大纲ID：{request.outline_id}\n" if request.outline_id else ""
    return (
        f"基于以下学习内容，生成{request.count}道练习题目。\n"
        "\n"
        "学习内容：\n"
        f"{request.content}\n"
        "\n"
        "要求：\n"
        f"- 题目类型：{_describe_types(request, 'zh')}\n"
        f"- 难度等级：{_DIFFICULTY_TEXT['zh'][request.difficulty]}\n"
        f"- 题目总数：恰好{request.count}道\n"
        f"{outline_line}"
        "\n"
        "每道题目需要包含：\n"
        "- 唯一ID\n"
        "- 题目类型（single_choice、multiple_choice、fill、essay）\n"
        "- 清晰的题目标题/内容\n"
        "- 选项（选择题需要选项，其他题型为空数组）\n"
        "- 正确答案\n"
        "- 详细的答案解释\n"
        "\n"
        "题型指导原则：\n"
        "- single_choice（单选题）：4个选项中选择1个正确答案\n"
        "- multiple_choice（多选题）：4-6个选项中选择多个正确答案\n"
        "- fill（填空题）：空白处用___标记的填空格式\n"
        "- essay（问答题）：需要详细回答的开放性问题\n"
        "\n"
        "确保题目能够测试学习者对提供内容中关键概念的理解。\n"
        "生成多样化的题目，覆盖材料的不同方面。"
    )


# ---------------------------------------------------------------------------
# Text to image
# ---------------------------------------------------------------------------

PRINCIPLE_SYSTEM_PROMPT = " ".join(
    [
        "You are a precise science explainer.",
        "Return ONLY a compact JSON object that strictly matches the provided schema.",
        "Be concise, classroom-safe, and avoid controversial or unsafe content.",
    ]
)


def build_principle_prompt(topic: str) -> tuple[str, str]:
    """Return ``(system, user)`` prompts for a principle breakdown of *topic*."""
    user = "\n".join(
        [
            f"Topic: {topic}",
            "Return fields: topic, summary, mechanism[], cause[], effects[], consequence[],"
            " analogies[]?, classroomSafe",
            "Keep text simple and suitable for a 5-panel classroom infographic.",
        ]
    )
    return PRINCIPLE_SYSTEM_PROMPT, user


def build_image_prompt(topic: str, style: str | None = None) -> str:
    """Return the five-panel cartoon infographic prompt for *topic*."""
    prompt = f"""You are an illustrator creating a fun and educational infographic in a simple flat cartoon style.

Style:
- Flat, minimalistic, playful cartoon.
- Clean white background.
- Use bold pastel colors (yellow, green, blue, gray).
- Strong black outlines with light soft shadows.
- Characters are expressive, with cartoon humor (banana professor with glasses, talking tree, funny sun, etc.).
- Consistent palette and stroke style across all panels.

Layout:
- Divide the canvas into **5 clear horizontal panels**.
- Place a big bold title at the top: "WHY {topic.upper()}?"
- Each panel has a short label (1-2 words only).

Content (5 steps about {topic}):
1. **Introduction**: introduce {topic} in a playful scene.
2. **Scene**: show what is happening around {topic}.
3. **Cause**: illustrate the main trigger of {topic}, with mascots explaining.
4. **Effect**: show the direct effects of {topic}.
5. **Consequence**: present the final outcome of {topic}, with emotional character reactions.

Extra touches:
- Add small icons/mascots in each panel (e.g. cute dinosaurs, funny sun, talking tree).
- Keep classroom-friendly, simple, and easy to understand at a glance.
- Avoid clutter: large shapes, clear flow, minimal text.

Output:
- One single infographic illustration about {topic}.
- Resolution: 1024x1024 or higher."""
    if style:
        prompt += f"\n\nStyle note: {style}"
    return prompt
