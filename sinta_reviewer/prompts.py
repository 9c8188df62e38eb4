"""Instruction templates for every model task.

Builders are pure: they only format text. Anything that takes caller text
refuses empty input so a bad request never reaches the model.
"""
from enum import Enum
from typing import Dict, Tuple, Union

from .error_handling import InputValidationError, require_text
from .models import SECTION_KEYS


class AttachmentKind(Enum):
    IMAGE = "image"
    PDF = "pdf"


SECTION_GUIDELINES: Dict[str, str] = {
    "abstract": "Background, Problem, Method, Results, Conclusion. Max 250 words.",
    "methodology": "Clear, detailed, reproducible research procedures.",
    "results": "Clear presentation with tables/figures, statistical analysis.",
    "discussion": "Interpretation, comparison with previous research, implications.",
}

SINTA_REQUIREMENTS: Tuple[str, ...] = (
    "Title: Clear, specific, under 20 words",
    "Keywords: 3-5 relevant keywords",
    "Abstract: Complete structure, 150-250 words",
    "Introduction: Clear problem statement and objectives",
    "Methodology: Detailed and reproducible",
    "Results: Clear presentation with data",
    "Discussion: Compares with previous research",
    "Conclusion: Aligns with objectives",
    "References: At least 15 references, mostly recent (last 5 years)",
    "Writing: Academic language, proper grammar",
)

_ANALYSIS_SCOPE = {
    AttachmentKind.IMAGE: {
        "subject": "this journal page image",
        "steps": """1. Extract and analyze visible text content
2. Evaluate based on SINTA criteria:
   - Research quality and originality
   - Methodology clarity and rigor
   - Literature review completeness
   - Results presentation
   - Discussion depth
   - Reference quality and recency""",
    },
    AttachmentKind.PDF: {
        "subject": "this complete journal PDF",
        "steps": """1. Evaluate ALL sections:
   - Title and Keywords
   - Abstract (structure, clarity, completeness)
   - Introduction (background, problem statement, objectives)
   - Literature Review (comprehensiveness, recency)
   - Methodology (clarity, reproducibility, appropriateness)
   - Results (presentation, clarity, statistical analysis)
   - Discussion (depth, comparison with previous research)
   - Conclusion (alignment with objectives)
   - References (quantity, quality, recency)
2. Apply the SINTA criteria checklist:
   - Original research contribution
   - Methodological rigor
   - Results significance
   - Discussion quality
   - Reference quality (prefer papers from last 5 years)
   - Writing quality and structure
   - Completeness of all sections""",
    },
}


def _analysis_json_shape() -> str:
    sections = ",\n".join(f'    "{key}": "analysis of {key}"' for key in SECTION_KEYS)
    return f"""{{
  "sintaLevel": "SINTA X",
  "publishabilityScore": 0-100,
  "completeness": 0-100,
  "weaknesses": ["weakness1", "weakness2", ...],
  "suggestions": ["suggestion1", "suggestion2", ...],
  "detailedAnalysis": {{
{sections}
  }}
}}"""


def build_analysis_prompt(kind: Union[AttachmentKind, str]) -> str:
    """Instruction for a full SINTA assessment of an attached image or PDF"""
    try:
        kind = AttachmentKind(kind)
    except ValueError:
        raise InputValidationError(f"Unsupported analysis kind: {kind!r}")

    scope = _ANALYSIS_SCOPE[kind]
    return f"""You are an expert academic journal reviewer specializing in Indonesian SINTA (Science and Technology Index) evaluation.

Analyze {scope['subject']} and provide a comprehensive assessment:

{scope['steps']}

3. Predict SINTA level (1-6, where 1 is highest)
4. Calculate scores:
   - Publishability Score (0-100)
   - Completeness Score (0-100)
5. Identify specific weaknesses
6. Provide actionable improvement suggestions

Return your analysis in this JSON format:
{_analysis_json_shape()}

Be constructive, specific, and actionable in your feedback."""


@require_text("context")
def build_chat_system_instruction(context: str) -> str:
    return f"""You are an expert academic journal reviewer helping improve a research paper for SINTA publication.

Journal context: {context}

Provide specific, actionable feedback. You can:
- Explain specific weaknesses in detail
- Suggest improvements for any section
- Provide revised versions of text
- Answer questions about SINTA criteria
- Give writing and structure advice

Be professional, constructive, and helpful. Keep responses concise and focused."""


@require_text("current_text")
def build_section_improvement_prompt(section: str, current_text: str) -> str:
    guideline = SECTION_GUIDELINES.get(section)
    if guideline is None:
        raise InputValidationError(
            f"Unknown section '{section}', expected one of: {', '.join(SECTION_GUIDELINES)}"
        )

    return f"""Improve this journal {section} to meet SINTA standards.

Current text:
"{current_text}"

Guidelines for {section}: {guideline}

Provide:
1. Improved version of the text
2. Specific changes made
3. Why these changes improve the quality

Format your response clearly with sections."""


@require_text("journal_text")
def build_checklist_prompt(journal_text: str) -> str:
    requirements = "\n".join(f"{i}. {req}" for i, req in enumerate(SINTA_REQUIREMENTS, 1))
    return f"""Evaluate this journal against SINTA requirements checklist:

Journal text: "{journal_text}"

Check these requirements:
{requirements}

Return JSON:
{{
  "passed": number,
  "total": {len(SINTA_REQUIREMENTS)},
  "checklist": [
    {{
      "item": "requirement name",
      "status": "pass" | "fail" | "warning",
      "details": "specific explanation"
    }},
    ...
  ]
}}"""


def build_text_extraction_prompt() -> str:
    return """Extract all visible text from this image.
Maintain the structure and formatting as much as possible.
Return only the extracted text, no additional commentary."""


def build_reviewer_greeting(initial_analysis: str = "") -> str:
    if initial_analysis and initial_analysis.strip():
        return f"I've analyzed your journal. {initial_analysis.strip()}\n\nHow can I help you improve it?"
    return "Hello! I'm your AI journal reviewer. Share your journal or ask me anything about SINTA requirements."


# Language tutor prompts

def build_tutor_system_instruction() -> str:
    return "You are a helpful English learning assistant."


def build_debate_topic_prompt() -> str:
    return """Generate one random interesting debate topic for English learners.
The topic should be:
- Suitable for intermediate to advanced English learners
- Engaging and thought-provoking
- Not too controversial or sensitive
- Can be discussed in 5-10 minutes

Just give the topic, no explanation. Format: "Topic: [your topic here]\""""


@require_text("topic")
def build_debate_opener(topic: str) -> str:
    return f"Let's discuss the topic: {topic}"


@require_text("topic")
def build_debate_greeting(topic: str) -> str:
    return f'Let\'s discuss: "{topic}". What\'s your opinion on this? Feel free to share your thoughts.'


def build_pronunciation_text_prompt() -> str:
    return """Generate a short English text (2-3 sentences) for pronunciation practice.
The text should:
- Include common English words that are often mispronounced
- Be interesting and meaningful
- Include a mix of different sounds and phonemes
- Be suitable for intermediate learners

Just give the text, no explanation or title."""


@require_text("original_text")
def build_pronunciation_analysis_prompt(original_text: str) -> str:
    return f"""You are an English pronunciation teacher.

The student was supposed to read this text:
"{original_text}"

Please analyze their pronunciation and provide:
1. Overall pronunciation score (0-100)
2. Specific words that were mispronounced
3. Common pronunciation errors detected
4. Tips for improvement
5. Encouragement and positive feedback

Be constructive and encouraging in your feedback."""


@require_text("user_message")
def build_grammar_prompt(user_message: str, context: str = "") -> str:
    context_block = f"Context: {context}\n\n" if context and context.strip() else ""
    return f"""You are an English grammar teacher.

{context_block}Student's message: "{user_message}"

Please analyze the grammar and provide:
1. Grammar score (0-100)
2. Grammatical errors (if any) with corrections
3. Suggestions for better sentence structure
4. Vocabulary usage feedback
5. Brief encouragement

Format your response clearly with sections."""
