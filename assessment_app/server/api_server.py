"""FastAPI server that exposes the candidate assessment endpoints."""

from __future__ import annotations

from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import HTMLResponse
from pydantic import BaseModel
import uvicorn

from assessment_app.constants.about import (
    APP_ABOUT_TEXT,
    APP_LICENSE,
    APP_NAME,
    APP_VERSION,
    RULES_TEXT,
)
from assessment_app.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from assessment_app.core.assessment_manager import AssessmentManager
from assessment_app.core.markdown_renderer import renderer
from assessment_app.core.models import IntegrityEvent, ScoreSummary, SessionSnapshot
from assessment_app.core.question_bank_loader import QuestionBankError
from assessment_app.core.services.adaptive_selector import EmptyBankError
from assessment_app.core.services.countdown_clock import format_clock

_CANDIDATE_PAGE_HTML = """<!doctype html>
<html lang=\"en\">
  <head>
    <meta charset=\"utf-8\" />
    <title>SkillTest</title>
    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />
    <style>
      :root { font-family: 'Inter', system-ui, sans-serif; background: #0b1120; color: #f5f7ff; }
      body { margin: 0; padding: 1.5rem; display: flex; flex-direction: column; gap: 1rem; user-select: none; }
      .card { background: #111a30; border-radius: 0.75rem; padding: 1.5rem; }
      .hidden { display: none; }
      .primary-button, .option-button { border: none; border-radius: 0.75rem; padding: 0.85rem 1.5rem; font-size: 1rem; background: #1f9aa5; color: #fff; cursor: pointer; }
      .option-button.selected { background: #16808a; outline: 2px solid #facc15; }
      .options-grid { display: grid; grid-template-columns: repeat(auto-fit, minmax(220px, 1fr)); gap: 0.75rem; margin: 1rem 0; }
      #status-bar { display: flex; gap: 1.5rem; color: #94a3b8; }
      #warning { color: #f87171; min-height: 1.25rem; }
    </style>
  </head>
  <body>
    <section class=\"card\" id=\"start-card\">
      <h1>Skill Assessment</h1>
      <p id=\"rules\"></p>
      <button id=\"start-button\" class=\"primary-button\">Start Assessment</button>
      <p id=\"load-status\"></p>
    </section>
    <section class=\"card hidden\" id=\"test-card\">
      <div id=\"status-bar\">
        <span id=\"timer\"></span><span id=\"progress\"></span><span id=\"difficulty\"></span><span id=\"infractions\"></span>
      </div>
      <p id=\"warning\"></p>
      <div id=\"question\"></div>
      <div id=\"options\" class=\"options-grid\"></div>
      <button id=\"next-button\" class=\"primary-button\" disabled>Next Question</button>
    </section>
    <section class=\"card hidden\" id=\"result-card\">
      <h2>Assessment Complete</h2>
      <p id=\"result\"></p>
      <button id=\"reset-button\" class=\"primary-button\">Retake Assessment</button>
    </section>
    <script>
      const params = new URLSearchParams(window.location.search);
      const careerTitle = params.get('career');
      let phase = 'idle';
      let selected = null;
      let pollHandle = null;

      function show(id, visible) {
        document.getElementById(id).classList.toggle('hidden', !visible);
      }

      async function post(path, body) {
        const response = await fetch(path, {
          method: 'POST',
          headers: { 'Content-Type': 'application/json' },
          body: JSON.stringify(body ?? {})
        });
        const payload = await response.json();
        if (!response.ok) throw new Error(payload.detail ?? 'Request failed');
        return payload;
      }

      function sendSignal(kind) {
        if (phase !== 'running') return;
        post('/assessment/signal', { kind }).then(render).catch(() => {});
      }

      function render(payload) {
        const state = payload.state;
        if (!state) return;
        phase = state.phase;
        show('start-card', phase === 'idle');
        show('test-card', phase === 'running');
        show('result-card', phase === 'finished');
        document.getElementById('timer').textContent = state.remaining_display;
        document.getElementById('progress').textContent = `Question ${state.question_number} / ${state.question_count}`;
        document.getElementById('difficulty').textContent = state.difficulty_of_current_question ?? '';
        document.getElementById('infractions').textContent = `Infractions ${state.infraction_count} / ${state.max_attempts}`;
        document.getElementById('warning').textContent = state.latest_infraction_reason
          ? `Warning: ${state.latest_infraction_reason}` : (state.presentation_warning ?? '');
        if (payload.question && payload.question.question_id !== renderedQuestionId) {
          renderQuestion(payload.question);
        }
        if (phase === 'finished') {
          clearInterval(pollHandle);
          if (document.fullscreenElement) document.exitFullscreen().catch(() => {});
          const s = payload.summary;
          document.getElementById('result').textContent = s
            ? `Score ${s.raw_score} / ${s.max_possible} (${s.percentage_score}%), accuracy ${s.accuracy.toFixed(0)}%, time ${s.elapsed_display}`
            : 'Session ended.';
        }
      }

      let renderedQuestionId = null;
      function renderQuestion(question) {
        renderedQuestionId = question.question_id;
        selected = null;
        document.getElementById('next-button').disabled = true;
        document.getElementById('question').innerHTML = question.question_html;
        const container = document.getElementById('options');
        container.innerHTML = '';
        question.options_html.forEach((html, index) => {
          const button = document.createElement('button');
          button.className = 'option-button';
          button.innerHTML = html;
          button.onclick = () => {
            selected = index;
            container.querySelectorAll('.option-button').forEach(b => b.classList.remove('selected'));
            button.classList.add('selected');
            document.getElementById('next-button').disabled = false;
          };
          container.appendChild(button);
        });
      }

      async function refresh() {
        const response = await fetch('/assessment/state');
        if (response.ok) render(await response.json());
      }

      document.getElementById('start-button').onclick = async () => {
        document.documentElement.requestFullscreen().catch(err => {
          post('/assessment/presentation', { acquired: false, detail: err.message }).catch(() => {});
        });
        render(await post('/assessment/start'));
        pollHandle = setInterval(refresh, 1000);
      };
      document.getElementById('next-button').onclick = async () => {
        if (selected === null) return;
        render(await post('/assessment/answer', { selected_option_index: selected }));
      };
      document.getElementById('reset-button').onclick = async () => {
        renderedQuestionId = null;
        render(await post('/assessment/reset'));
      };

      document.addEventListener('contextmenu', e => e.preventDefault());
      document.addEventListener('copy', () => sendSignal('clipboard_copy'));
      document.addEventListener('paste', () => sendSignal('clipboard_paste'));
      document.addEventListener('keydown', e => {
        if ((e.ctrlKey || e.metaKey) && ['c', 'x', 'v'].includes(e.key.toLowerCase())) sendSignal('forbidden_shortcut');
      });
      document.addEventListener('visibilitychange', () => { if (document.hidden) sendSignal('tab_switch'); });
      document.addEventListener('fullscreenchange', () => { if (!document.fullscreenElement) sendSignal('fullscreen_exit'); });

      post('/assessment', { career_title: careerTitle })
        .then(payload => {
          document.getElementById('rules').textContent = payload.rules;
          render(payload);
        })
        .catch(err => { document.getElementById('load-status').textContent = err.message; });
    </script>
  </body>
</html>
"""


class LoadBankPayload(BaseModel):
    """Payload schema for selecting a career question bank."""

    career_title: str | None = None


class AnswerPayload(BaseModel):
    """Payload schema for submitted answers."""

    selected_option_index: int | None = None


class SignalPayload(BaseModel):
    """Payload schema for integrity signals forwarded by the candidate page."""

    kind: IntegrityEvent


class PresentationPayload(BaseModel):
    """Payload schema for full-screen acquisition results."""

    acquired: bool
    detail: str | None = None


def _snapshot_to_dict(snapshot: SessionSnapshot) -> dict[str, object]:
    difficulty = snapshot.difficulty_of_current_question
    reason = snapshot.termination_reason
    return {
        "phase": snapshot.phase.value,
        "remaining_seconds": snapshot.remaining_seconds,
        "remaining_display": snapshot.remaining_display,
        "current_question_index": snapshot.current_question_index,
        "question_number": snapshot.question_number,
        "question_count": snapshot.question_count,
        "infraction_count": snapshot.infraction_count,
        "max_attempts": snapshot.max_attempts,
        "latest_infraction_reason": snapshot.latest_infraction_reason,
        "difficulty_of_current_question": difficulty.value if difficulty else None,
        "presentation_warning": snapshot.presentation_warning,
        "termination_reason": reason.value if reason else None,
        "started_at": snapshot.started_at.isoformat() if snapshot.started_at else None,
        "finished_at": snapshot.finished_at.isoformat() if snapshot.finished_at else None,
    }


def _summary_to_dict(summary: ScoreSummary) -> dict[str, object]:
    return {
        "raw_score": summary.raw_score,
        "max_possible": summary.max_possible,
        "percentage_score": summary.percentage_score,
        "accuracy": summary.accuracy,
        "correct_count": summary.correct_count,
        "answered_count": summary.answered_count,
        "difficulty_distribution": summary.difficulty_distribution,
        "elapsed_seconds": summary.elapsed_seconds,
        "elapsed_display": format_clock(summary.elapsed_seconds),
        "termination_reason": summary.termination_reason.value,
    }


def _build_state_payload(manager: AssessmentManager) -> dict[str, object]:
    snapshot = manager.get_state()
    question = manager.get_current_question()
    summary = manager.get_summary()
    question_payload = None
    if question is not None:
        # The correct option index never leaves the server.
        question_payload = {"question_id": question.id, **renderer.render_question(question)}
    return {
        "state": _snapshot_to_dict(snapshot) if snapshot else None,
        "question": question_payload,
        "summary": _summary_to_dict(summary) if summary else None,
    }


def _get_manager_dependency(manager: AssessmentManager):
    def dependency() -> AssessmentManager:
        return manager

    return dependency


def create_api_app(manager: AssessmentManager) -> FastAPI:
    """Create a FastAPI application wired to the provided assessment manager."""
    app = FastAPI(
        title=f"{APP_NAME} API",
        version=APP_VERSION,
        description=APP_ABOUT_TEXT,
        license_info={"name": APP_LICENSE},
    )
    manager_dep = _get_manager_dependency(manager)

    @app.get("/", response_class=HTMLResponse)
    def serve_candidate_page() -> str:
        return _CANDIDATE_PAGE_HTML

    @app.post("/assessment", status_code=201)
    def load_bank(
        payload: LoadBankPayload,
        manager: AssessmentManager = Depends(manager_dep),
    ) -> dict[str, object]:
        try:
            bank = manager.load_bank(payload.career_title)
        except (EmptyBankError, QuestionBankError) as exc:
            raise HTTPException(status_code=503, detail=str(exc)) from exc
        state = _build_state_payload(manager)
        config = manager.get_config()
        state.update(
            {
                "career_slug": bank.career_slug,
                "question_total": len(bank.questions),
                "rules": _rules_text(config.duration_seconds, config.question_count, config.max_attempts),
            }
        )
        return state

    @app.post("/assessment/start")
    def start_assessment(manager: AssessmentManager = Depends(manager_dep)) -> dict[str, object]:
        try:
            manager.start_session()
        except RuntimeError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return _build_state_payload(manager)

    @app.post("/assessment/answer")
    def submit_answer(
        payload: AnswerPayload,
        manager: AssessmentManager = Depends(manager_dep),
    ) -> dict[str, object]:
        try:
            record = manager.submit_answer(payload.selected_option_index)
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except RuntimeError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        state = _build_state_payload(manager)
        state["accepted"] = record is not None
        return state

    @app.post("/assessment/signal")
    def report_signal(
        payload: SignalPayload,
        manager: AssessmentManager = Depends(manager_dep),
    ) -> dict[str, object]:
        delivered = manager.report_signal(payload.kind)
        state = _build_state_payload(manager)
        state["counted"] = delivered > 0
        return state

    @app.post("/assessment/presentation")
    def report_presentation(
        payload: PresentationPayload,
        manager: AssessmentManager = Depends(manager_dep),
    ) -> dict[str, object]:
        if not payload.acquired:
            try:
                manager.report_presentation_failure(payload.detail)
            except RuntimeError as exc:
                raise HTTPException(status_code=409, detail=str(exc)) from exc
        return _build_state_payload(manager)

    @app.post("/assessment/reset")
    def reset_assessment(manager: AssessmentManager = Depends(manager_dep)) -> dict[str, object]:
        try:
            manager.reset_session()
        except RuntimeError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return _build_state_payload(manager)

    @app.get("/assessment/state")
    def get_state(manager: AssessmentManager = Depends(manager_dep)) -> dict[str, object]:
        return _build_state_payload(manager)

    @app.get("/progress")
    def get_progress(manager: AssessmentManager = Depends(manager_dep)) -> dict[str, object]:
        report = manager.get_progress()
        return {
            "modules": [
                {
                    "module_id": module.module_id,
                    "status": module.status.value,
                    "score": module.score,
                    "completed_at": module.completed_at.isoformat() if module.completed_at else None,
                }
                for module in report.modules
            ],
            "overall_completion": report.overall_completion,
            "average_score": report.average_score,
        }

    return app


def _rules_text(duration_seconds: int, question_count: int, max_attempts: int) -> str:
    return RULES_TEXT.format(
        minutes=duration_seconds // 60,
        count=question_count,
        max_attempts=max_attempts,
    )


def run_api_server(
    manager: AssessmentManager,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
) -> None:
    """Serve the API in the calling thread until interrupted."""
    app = create_api_app(manager)
    config = uvicorn.Config(app=app, host=host, port=port, log_level="info")
    uvicorn.Server(config).run()
