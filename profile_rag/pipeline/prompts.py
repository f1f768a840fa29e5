from typing import List

from profile_rag.models import ArticleRequest, RetrievedChunk

NO_MATCH_ANSWER = (
    "I could not find relevant information for that question in the provided profile data. "
    "Please ask about experience, skills, projects, salary/location, or interview preparation."
)
EMPTY_ANSWER = "Unable to generate response."
ANSWER_ERROR = "Error generating response. Please try again."

EMPTY_ARTICLE = "Unable to generate article."
ARTICLE_ERROR = "Error generating article. Please try again."

NO_CONTEXT = "No specific context available."

ANSWER_SYSTEM_PROMPT = """You are an AI assistant helping with career and interview preparation. Answer questions using ONLY the context taken from a professional profile. Be concise and practical.

Rules:
- Only use information from the provided context
- If information is missing, say so clearly
- Focus on interview preparation, achievements, technical skills, and career goals
- Be direct and actionable"""

ARTICLE_SYSTEM_PROMPT = """You are an expert article writer specializing in project narratives. Write complete, well-structured articles from the project information provided. Every article must include:

- A clear, compelling title that captures the essence of the project
- An engaging introduction that gives context and sets the stage
- Several well-developed body paragraphs that:
  * Describe the project's goals and objectives
  * Explain the activities and methods used
  * Highlight key outcomes and achievements
  * Discuss the impact and significance
- A thoughtful conclusion that summarizes the key points and offers final insights

Style requirements:
- Professional yet engaging narrative tone
- Clear, accessible writing
- Expand on every provided detail with relevant elaboration
- Logical flow and organization
- A cohesive story that brings the project to life"""

ARTICLE_CONTEXT_RULE = "\n- Use the provided context as additional reference when relevant"


def build_context_block(chunks: List[RetrievedChunk]) -> str:
    """One "<path>: <text>" line per chunk, in rank order."""
    return "\n".join(f"{c.path}: {c.text}" for c in chunks)


def answer_user_message(question: str, context: str) -> str:
    return (
        f"Question: {question}\n\n"
        f"Context from profile:\n{context}\n\n"
        "Answer the question based only on the provided context:"
    )


def article_user_message(topic: str, context: str) -> str:
    return (
        "Please write a comprehensive narrative article based on the following project information:\n\n"
        f"{topic}\n\n"
        f"Additional context from database:\n{context}\n\n"
        "Generate a detailed, well-structured article that tells the complete story of this project."
    )


def build_topic_prompt(request: ArticleRequest) -> str:
    """Labeled fields in a fixed order, empty ones left out, separated by blank lines."""
    fields = [
        ("Project Title", request.project_title),
        ("Date", request.project_date),
        ("Organized by", request.club),
        ("Project Details", request.narrative),
    ]
    return "\n\n".join(f"{label}: {value}" for label, value in fields if value)
