from typing import List

from packages.isim_session.dto import Question

QUESTION_SYSTEM_PROMPT = "You are a technical interviewer. Always respond with valid JSON only."

QUESTION_USER_PROMPT = """You are an expert technical interviewer for a Full Stack Developer position (React/Node.js).

Based on the following resume, generate exactly 6 interview questions:
- 2 Easy questions (should take ~20 seconds to answer)
- 2 Medium questions (should take ~60 seconds to answer)
- 2 Hard questions (should take ~120 seconds to answer)

Resume:
{resume_text}

Return ONLY a JSON object with this exact structure:
{{"questions": [{{"id": 1, "difficulty": "Easy", "question": "question text here", "timeLimit": 20}}, ...]}}

Make questions relevant to Full Stack development with React and Node.js."""

SUMMARY_SYSTEM_PROMPT = (
    "You are an expert technical interviewer providing candidate summaries. "
    "Return valid JSON only."
)

SUMMARY_USER_PROMPT = """Generate a concise interview summary for {candidate_name}.

Interview Questions and Answers:
{transcript}

Provide:
1. Overall score (0-100)
2. Brief summary (2-3 sentences) highlighting strengths and areas for improvement

Return JSON format:
{{"score": <number 0-100>, "summary": "<2-3 sentence summary>"}}"""

def format_transcript(questions: List[Question]) -> str:
    return "\n".join(
        f"Q{i + 1} ({q.difficulty.value}): {q.question}\nA: {q.answer or 'No answer provided'}\n"
        for i, q in enumerate(questions)
    )
