from models import ArticleContent

MAX_ARTICLE_CHARS = 3000

PROMPT_TEMPLATE = """You are an expert educational content generator creating quizzes from Wikipedia articles.

Based on this Wikipedia article, generate a quiz.

Article Title: {title}
Description: {description}
Content: {content}

RULES:
1. Use ONLY facts stated in the content above - no external knowledge
2. Create 5-10 multiple choice questions, each with EXACTLY 4 options
3. The answer must match one of the options exactly
4. Mix easy, medium and hard questions
5. Extract people, organizations and locations that are actually mentioned
6. Return ONLY a JSON object (no markdown, no explanation, no extra keys)

JSON SCHEMA (return ONLY this, nothing else):
{{
  "title": "{title}",
  "summary": "2-3 sentence summary",
  "key_entities": {{
    "people": ["person1", "person2"],
    "organizations": ["org1"],
    "locations": ["location1"]
  }},
  "sections": ["section1", "section2"],
  "quiz": [
    {{
      "question": "Question text?",
      "options": ["Option A", "Option B", "Option C", "Option D"],
      "answer": "The correct option (must match exactly)",
      "difficulty": "easy" | "medium" | "hard",
      "explanation": "Why this is correct"
    }}
  ],
  "related_topics": ["topic1", "topic2"]
}}

Generate the quiz now. Return ONLY valid JSON, no other text.
"""


def build_prompt(article: ArticleContent) -> str:
    return PROMPT_TEMPLATE.format(
        title=article.title,
        description=article.description,
        content=article.extract[:MAX_ARTICLE_CHARS],
    )
