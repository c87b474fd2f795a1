"""
Local stand-in for the remote services the dashboard talks to.

Serves the auth, expense-registration and AI flow contracts over FastAPI
so the Streamlit app can run without the real backend. Users come from
``DEMO_USERS`` ("name:password,name2:password2"); registered expenses and
issued tokens live in memory. The AI flows are a keyword classifier and a
rule-based advisor.

Unlike the real classifier, which only answers with the seeded labels, the
stub answers "Uncategorized" at low confidence for text it has no keyword
for, so the app's fallback to "Other" can be exercised locally.

    uvicorn mock_api:app --port 8080
"""

import os
import re
import secrets
import uuid
from typing import Dict, Optional

import bcrypt
from fastapi import Depends, FastAPI, Header, HTTPException, Request

from insights import rule_based_recommendations
from schemas import (
    CategorizeRequest,
    CategorizeResponse,
    ExpenseRecord,
    LoginRequest,
    LoginResponse,
    RecommendationRequest,
    RecommendationResponse,
    RegisterExpenseRequest,
)

DEFAULT_DEMO_USERS = "demo@example.com:demo123"

KEYWORDS = {
    "grocery": "Food",
    "groceries": "Food",
    "restaurant": "Food",
    "dinner": "Food",
    "lunch": "Food",
    "coffee": "Food",
    "uber": "Transport",
    "lyft": "Transport",
    "taxi": "Transport",
    "gas": "Transport",
    "fuel": "Transport",
    "bus": "Transport",
    "rent": "Rent",
    "mortgage": "Rent",
    "electric": "Utilities",
    "water bill": "Utilities",
    "internet": "Utilities",
    "phone": "Utilities",
    "netflix": "Entertainment",
    "cinema": "Entertainment",
    "movie": "Entertainment",
    "concert": "Entertainment",
}


def parse_demo_users(raw: str) -> Dict[str, str]:
    users = {}
    for entry in raw.split(","):
        name, sep, password = entry.strip().partition(":")
        if sep and name:
            users[name] = password
    return users


def seed_users(plain: Dict[str, str]) -> Dict[str, bytes]:
    return {name: bcrypt.hashpw(pw.encode("utf-8"), bcrypt.gensalt()) for name, pw in plain.items()}


def create_app(users: Optional[Dict[str, str]] = None) -> FastAPI:
    app = FastAPI(title="ExpensePilot Dev Services", version="0.1.0")
    if users is None:
        users = parse_demo_users(os.getenv("DEMO_USERS", DEFAULT_DEMO_USERS))
    app.state.password_hashes = seed_users(users)
    app.state.tokens = {}
    app.state.expenses = []

    def current_user(request: Request, authorization: Optional[str] = Header(None)) -> str:
        scheme, _, token = (authorization or "").partition(" ")
        username = request.app.state.tokens.get(token) if scheme.lower() == "bearer" else None
        if not username:
            raise HTTPException(status_code=401, detail="Missing or invalid token")
        return username

    @app.post("/auth/login", response_model=LoginResponse)
    async def login(req: LoginRequest, request: Request):
        hashed = request.app.state.password_hashes.get(req.username)
        if not hashed or not bcrypt.checkpw(req.password.encode("utf-8"), hashed):
            raise HTTPException(status_code=401, detail="Invalid credentials")
        token = secrets.token_urlsafe(32)
        request.app.state.tokens[token] = req.username
        return LoginResponse(token=token)

    @app.post("/api/v1/register-expense", response_model=ExpenseRecord)
    async def register_expense(req: RegisterExpenseRequest, request: Request, user: str = Depends(current_user)):
        record = ExpenseRecord(
            id=uuid.uuid4().hex,
            name=req.name,
            category=req.category_id,
            amount=req.amount,
            date=req.date,
        )
        request.app.state.expenses.append((user, record))
        return record

    @app.post("/flows/categorize-expense", response_model=CategorizeResponse)
    async def categorize_expense(req: CategorizeRequest):
        lowered = req.description.lower()
        for key, category in KEYWORDS.items():
            if re.search(rf"\b{re.escape(key)}\b", lowered):
                return CategorizeResponse(category=category, confidence=0.72)
        return CategorizeResponse(category="Uncategorized", confidence=0.1)

    @app.post("/flows/recommendations", response_model=RecommendationResponse)
    async def recommendations(req: RecommendationRequest):
        return rule_based_recommendations(req)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("mock_api:app", host="0.0.0.0", port=8080, reload=True)
