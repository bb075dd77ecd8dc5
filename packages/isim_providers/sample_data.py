"""
Demo data for running an interview without an API key.
"""
from typing import List

from packages.isim_core.dto import ResumeExtractionDTO
from packages.isim_session.dto import Question
from packages.isim_session.state import DIFFICULTY_PLAN

# Present in the sample résumé only; marks demo sessions.
SAMPLE_RESUME_MARKER = "JOHN DOE"

SAMPLE_RESUME_TEXT = """JOHN DOE
john.doe@email.com
+1 (555) 123-4567

PROFESSIONAL SUMMARY
Experienced Full Stack Developer with 5+ years of expertise in building scalable web applications using React, Node.js, and modern JavaScript frameworks.

WORK EXPERIENCE

Senior Full Stack Developer | Tech Innovations Inc.
- Architected and developed 10+ React applications
- Built RESTful APIs and microservices using Node.js
- Implemented real-time features using WebSockets

TECHNICAL SKILLS
Frontend: React.js, JavaScript, TypeScript, HTML5, CSS3
Backend: Node.js, Express.js, RESTful APIs
Databases: MongoDB, PostgreSQL, MySQL"""

BUILTIN_QUESTION_TEXTS = [
    "What is React and what are its main features?",
    "Explain the difference between let, const, and var in JavaScript.",
    "How does the virtual DOM work in React, and why is it beneficial?",
    "Explain middleware in Express.js and give an example of when you would use it.",
    "Design a REST API for a social media platform. What endpoints would you create and how would you handle authentication?",
    "How would you optimize a React application for performance? Discuss specific techniques like code splitting, lazy loading, memoization, and when to use them.",
]

def get_sample_resume() -> ResumeExtractionDTO:
    return ResumeExtractionDTO(
        name="John Doe",
        email="john.doe@email.com",
        phone="+1 (555) 123-4567",
        text=SAMPLE_RESUME_TEXT,
    )

def get_builtin_questions() -> List[Question]:
    """Fresh copy of the built-in question set (2 Easy, 2 Medium, 2 Hard)."""
    return [
        Question.create(i + 1, difficulty, text)
        for i, (difficulty, text) in enumerate(zip(DIFFICULTY_PLAN, BUILTIN_QUESTION_TEXTS))
    ]

def is_sample_resume(resume_text: str) -> bool:
    return SAMPLE_RESUME_MARKER in (resume_text or "")
