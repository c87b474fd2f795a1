"""
api_client.py
-------------

HTTP client for the services the dashboard depends on: the auth endpoint,
the expense-registration endpoint and the two generative-AI flows
(expense categorization and savings recommendations).

Every failure (connection error, timeout, non-2xx status, unexpected JSON)
comes back as ``RemoteFailure`` so callers have one thing to catch. No call
is retried.
"""

import logging
from typing import Optional

import requests
from pydantic import BaseModel, ValidationError

from config import Settings
from errors import AuthenticationError, RemoteFailure
from models import CategorizationSuggestion, Recommendation, RecommendationReport
from records import to_decimal
from schemas import (
    CategorizeRequest,
    CategorizeResponse,
    ExpenseForm,
    ExpenseRecord,
    LoginRequest,
    LoginResponse,
    RecommendationRequest,
    RecommendationResponse,
    RegisterExpenseRequest,
)

logger = logging.getLogger(__name__)

LOGIN_PATH = "/auth/login"
REGISTER_EXPENSE_PATH = "/api/v1/register-expense"
CATEGORIZE_PATH = "/flows/categorize-expense"
RECOMMENDATIONS_PATH = "/flows/recommendations"


class FinanceApiClient:
    def __init__(self, settings: Settings, session=None):
        """
        Args:
            settings: Base URLs and timeout.
            session: Anything with a ``requests``-style ``post`` method.
                Defaults to a new ``requests.Session``; tests pass a
                FastAPI ``TestClient``.
        """
        self.settings = settings
        self.session = session or requests.Session()

    def _post(self, url: str, payload: BaseModel, response_model, token: Optional[str] = None):
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        body = payload.model_dump(mode="json", by_alias=True, exclude_none=True)
        try:
            resp = self.session.post(url, json=body, headers=headers, timeout=self.settings.request_timeout)
        except requests.RequestException as exc:
            logger.warning("POST %s failed: %s", url, exc)
            raise RemoteFailure(f"Could not reach the server: {exc}") from exc

        if resp.status_code in (401, 403):
            logger.warning("POST %s rejected with %s", url, resp.status_code)
            raise AuthenticationError("The server rejected the credentials.", resp.status_code)
        if not 200 <= resp.status_code < 300:
            logger.warning("POST %s returned %s", url, resp.status_code)
            raise RemoteFailure(f"The server answered with status {resp.status_code}.", resp.status_code)

        try:
            return response_model.model_validate(resp.json())
        except (ValueError, ValidationError) as exc:
            logger.warning("POST %s returned an unexpected payload: %s", url, exc)
            raise RemoteFailure("The server sent an unexpected response.", resp.status_code) from exc

    # --- Auth ---

    def login(self, username: str, password: str) -> str:
        """Exchanges credentials for an opaque bearer token."""
        url = self.settings.api_base_url + LOGIN_PATH
        result = self._post(url, LoginRequest(username=username, password=password), LoginResponse)
        logger.info("Login succeeded for %s", username)
        return result.token

    # --- Expenses ---

    def register_expense(self, form: ExpenseForm, token: str) -> ExpenseRecord:
        url = self.settings.api_base_url + REGISTER_EXPENSE_PATH
        payload = RegisterExpenseRequest(
            name=form.name,
            category_id=form.category,
            amount=float(form.amount),
            date=form.date,
        )
        return self._post(url, payload, ExpenseRecord, token=token)

    # --- AI flows ---

    def categorize_expense(self, description: str) -> CategorizationSuggestion:
        url = self.settings.flows_base_url + CATEGORIZE_PATH
        result = self._post(url, CategorizeRequest(description=description), CategorizeResponse)
        return CategorizationSuggestion(category=result.category, confidence=result.confidence)

    def recommend(self, request: RecommendationRequest) -> RecommendationReport:
        url = self.settings.flows_base_url + RECOMMENDATIONS_PATH
        result = self._post(url, request, RecommendationResponse)
        return RecommendationReport(
            recommendations=[
                Recommendation(
                    category=r.category,
                    recommendation=r.recommendation,
                    potential_savings=to_decimal(r.potential_savings) if r.potential_savings is not None else None,
                )
                for r in result.recommendations
            ],
            summary=result.summary,
        )
