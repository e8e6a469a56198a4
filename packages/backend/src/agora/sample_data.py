"""Demo content for a fresh forum.

Used two ways:
- at startup, when AGORA_SEED_SAMPLE_DATA=true and the store is empty
  (seed_storage writes straight to the store, no broadcasts)
- by `agora seed`, which posts the same content through the REST API so
  connected clients see it arrive live
"""

import structlog

from agora.storage.base import ForumStorage

logger = structlog.get_logger()

SAMPLE_QUESTIONS: list[dict] = [
    {
        "title": "How do I implement authentication with JWT in Node.js?",
        "description": (
            "I'm building a REST API with Express and need to add user "
            "authentication. How should I issue, store, validate and refresh "
            "JSON Web Tokens?"
        ),
        "tags": "javascript,node.js,authentication,jwt,express",
        "answers": [
            "Sign a short-lived access token on login with jsonwebtoken, verify "
            "it in a middleware that reads the Authorization header, and keep "
            "refresh tokens in an HTTP-only cookie backed by a database table "
            "so they can be revoked.",
            "Look at passport-jwt. The strategy plugs into Passport, so "
            "protected routes just add passport.authenticate('jwt', "
            "{ session: false }).",
            "Keep tokens small, never put secrets in the claims (they are only "
            "base64 encoded) and add a jti claim if you need revocation.",
        ],
    },
    {
        "title": "What's the best way to manage state in a large React application?",
        "description": (
            "Prop drilling is getting out of hand. I've looked at Redux, the "
            "Context API and a few smaller libraries. Which approach scales?"
        ),
        "tags": "react,javascript,state-management,redux,frontend",
        "answers": [
            "Split it up: local state for UI, context for rarely changing "
            "globals like theme and auth, Redux Toolkit for shared client "
            "state, and React Query for anything that comes from the server.",
            "Zustand. No providers, almost no boilerplate, and it scaled fine "
            "for us past a hundred components.",
        ],
    },
    {
        "title": "How to optimize PostgreSQL queries for better performance?",
        "description": (
            "Some queries slow down as the data grows. I have basic indexes. "
            "What else should I look at, both in the queries and in the "
            "server configuration?"
        ),
        "tags": "postgresql,database,performance,sql,optimization",
        "answers": [
            "Start with EXPLAIN ANALYZE on the slow queries. Add composite or "
            "partial indexes that match your WHERE clauses, stop selecting *, "
            "and only then tune shared_buffers and work_mem.",
            "For very large time-series tables, partition by range and "
            "consider BRIN indexes. pg_stat_statements will tell you which "
            "queries to fix first.",
        ],
    },
    {
        "title": "Best practices for microservices architecture?",
        "description": (
            "We're planning to split a monolith. How do we draw service "
            "boundaries, pick a communication style, and handle transactions "
            "that span services?"
        ),
        "tags": "microservices,architecture,system-design,backend,devops",
        "answers": [
            "Draw boundaries around business capabilities, give every service "
            "its own database, and use events plus sagas instead of "
            "distributed transactions.",
            "Don't start with microservices. Extract services from the "
            "monolith one at a time (strangler pattern) once the team and "
            "tooling are ready.",
        ],
    },
    {
        "title": "How to implement real-time features with WebSockets?",
        "description": (
            "I need live notifications in my web app. Socket.IO or plain "
            "WebSockets? How do I manage connections and scale across servers?"
        ),
        "tags": "websockets,real-time,javascript,socket.io,node.js",
        "answers": [
            "Plain WebSockets are enough for server push. Keep a registry of "
            "open connections, broadcast on every change, and remove "
            "connections when they close. To scale out, put a pub/sub broker "
            "such as Redis between the servers.",
        ],
    },
]


async def seed_storage(storage: ForumStorage) -> int:
    """Load the sample questions and answers into an empty store.

    Returns the number of questions created (0 if the store already had
    content).
    """
    if await storage.list_questions():
        logger.info("seed.skipped", reason="store not empty")
        return 0

    for item in SAMPLE_QUESTIONS:
        question = await storage.create_question(
            title=item["title"],
            description=item["description"],
            tags=item["tags"],
        )
        for text in item["answers"]:
            await storage.create_answer(question_id=question.id, answer_text=text)

    logger.info("seed.completed", questions=len(SAMPLE_QUESTIONS))
    return len(SAMPLE_QUESTIONS)
