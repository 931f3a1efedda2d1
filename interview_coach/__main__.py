#!/usr/bin/env python3
"""
Main entry point for the Interview Coach.
Allows running the package with: python -m interview_coach
"""
import os
import sys
import threading

from .config import get_config
from .errors import CoachError
from .utils.logging import setup_logging
from .utils.documents import load_document, read_text_file
from .infrastructure.llm import GeminiRestClient
from .infrastructure.data import create_document_store, HistoryRepository
from .accounts import UserDirectory, AuthSession
from .candidate import ProfileService, profile_to_text
from .cv import CVService, CVPdfRenderer, select_changes
from .interview import InterviewOrchestrator, InterviewInputs, InterviewStatus, export_report

USAGE = """Usage: python -m interview_coach COMMAND [options]

Commands:
  signin EMAIL
  signout
  interview --jd FILE [--cv FILE] [--linkedin FILE] [--profile]
  analyze --jd FILE (--cv FILE | --profile) [--rewrite] [--pdf OUT]
  profile import FILE | show | reset
  history [--delete ID KIND | --clear]
  admin --pin PIN (list | add EMAIL | remove EMAIL)
"""


def _option(args, name):
    """Value following a --name flag, or None."""
    if name in args:
        idx = args.index(name)
        if idx + 1 < len(args):
            return args[idx + 1]
        print(f"❌ {name} needs a value")
        sys.exit(2)
    return None


def _positionals(args):
    out, skip = [], False
    for arg in args:
        if skip:
            skip = False
        elif arg in ("--jd", "--cv", "--linkedin", "--pdf", "--pin", "--delete"):
            skip = True
        elif not arg.startswith("--"):
            out.append(arg)
    return out


def _build_llm_client(config):
    return GeminiRestClient(
        api_key=config.gemini_api_key,
        project=config.google_cloud_project,
        location=config.vertex_location,
        credentials_json=config.google_application_credentials,
        timeout=config.llm_timeout,
        retries=config.llm_retries,
        retry_delay=config.llm_retry_delay,
    )


# =============================================================================
# Commands
# =============================================================================

def cmd_signin(config, store, auth, args):
    positional = _positionals(args)
    if not positional:
        print("❌ Usage: signin EMAIL")
        sys.exit(2)
    user = auth.sign_in(positional[0])
    print(f"✅ Signed in as {user.email}{' (admin)' if user.is_admin else ''}")


def cmd_signout(config, store, auth, args):
    auth.sign_out()
    print("👋 Signed out")


def cmd_interview(config, store, auth, args):
    user = auth.require_user()
    jd_path = _option(args, "--jd")
    if not jd_path:
        print("❌ --jd FILE is required")
        sys.exit(2)

    cv_path = _option(args, "--cv")
    linkedin_path = _option(args, "--linkedin")
    profile = None
    if "--profile" in args or not cv_path:
        profile = ProfileService(store).load(user.email)
        if profile is None:
            print("❌ No saved profile. Use --cv FILE or run 'profile import FILE' first.")
            sys.exit(1)

    inputs = InterviewInputs(
        job_description=read_text_file(jd_path),
        cv=load_document(cv_path) if cv_path else None,
        linkedin=load_document(linkedin_path) if linkedin_path else None,
        profile=profile,
    )

    orchestrator = InterviewOrchestrator.from_config(config, llm_client=_build_llm_client(config))
    print("🎤 Mock interview starting. Answer each question aloud, then press Enter.")
    print("   (Ctrl+C abandons the interview)")

    def stdin_loop():
        for _ in sys.stdin:
            orchestrator.stop_recording()

    threading.Thread(target=stdin_loop, daemon=True).start()

    result = {}
    worker = threading.Thread(target=lambda: result.update(session=orchestrator.run(inputs)))
    worker.start()
    try:
        while worker.is_alive():
            worker.join(0.5)
    except KeyboardInterrupt:
        print("\n🛑 Abandoning interview...")
        orchestrator.abandon()
        worker.join()

    session = result.get("session")
    if session is None or session.status != InterviewStatus.COMPLETE:
        sys.exit(1)

    doc_id = HistoryRepository(store).save_interview_report(user.email, session.report)
    md_path, txt_path = export_report(session.report, os.path.join(config.workdir, "reports"), stem=doc_id)
    print(f"💾 Saved to history ({doc_id})")
    print(f"📄 Transcript: {md_path}")
    print(f"📄 Report:     {txt_path}")


def cmd_analyze(config, store, auth, args):
    user = auth.require_user()
    jd_path = _option(args, "--jd")
    cv_path = _option(args, "--cv")
    if not jd_path or not (cv_path or "--profile" in args):
        print("❌ Usage: analyze --jd FILE (--cv FILE | --profile) [--rewrite] [--pdf OUT]")
        sys.exit(2)

    if cv_path:
        cv_input = load_document(cv_path)
    else:
        cv_input = ProfileService(store).load(user.email)
        if cv_input is None:
            print("❌ No saved profile. Run 'profile import FILE' first.")
            sys.exit(1)

    job_description = read_text_file(jd_path)
    service = CVService(_build_llm_client(config), rewrite_timeout=config.cv_rewrite_timeout)
    history = HistoryRepository(store)

    print("🔍 Analyzing your CV against the job description...")
    result = service.analyze_cv(job_description, cv_input)
    history.save_cv_analysis(user.email, result, job_description)
    _display_analysis(result)

    if "--rewrite" not in args:
        return

    print("\n✍️  Rewriting your CV (this can take a few minutes)...")
    improvements, additions, keywords = select_changes(result)
    _, profile = service.generate_full_cv(result.extracted_text, improvements, additions, keywords)

    renderer = CVPdfRenderer()
    pdf_bytes = renderer.render(profile)
    out_path = _option(args, "--pdf") or os.path.join(config.workdir, "cv.pdf")
    out_dir = os.path.dirname(out_path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    with open(out_path, "wb") as f:
        f.write(pdf_bytes)
    print(f"📄 CV written to {out_path} ({renderer.page_count} page(s))")

    if history.save_generated_cv(user.email, pdf_bytes) is None:
        print("⚠️  PDF is too large to save to history; the local file was kept.")


def cmd_profile(config, store, auth, args):
    user = auth.require_user()
    positional = _positionals(args)
    action = positional[0] if positional else "show"

    if action == "import":
        if len(positional) < 2:
            print("❌ Usage: profile import FILE")
            sys.exit(2)
        service = ProfileService(store, _build_llm_client(config))
        print("📥 Extracting your profile from the CV...")
        profile = service.import_cv(user.email, load_document(positional[1]))
        print(f"✅ Imported {len(profile.experience)} roles, {len(profile.education)} schools, "
              f"{len(profile.skills)} skills")
    elif action == "show":
        profile = ProfileService(store).load(user.email)
        if profile is None:
            print("ℹ️  No saved profile.")
        else:
            print(profile_to_text(profile))
    elif action == "reset":
        ProfileService(store).reset(user.email)
        print("🧹 Profile reset")
    else:
        print(f"❌ Unknown profile action '{action}'")
        sys.exit(2)


def cmd_history(config, store, auth, args):
    user = auth.require_user()
    history = HistoryRepository(store)

    if "--clear" in args:
        count = history.delete_all_user_history(user.email)
        print(f"🧹 Deleted {count} history item(s)")
        return

    item_id = _option(args, "--delete")
    if item_id:
        positional = _positionals(args)
        kind = positional[0] if positional else "interview"
        if history.delete_history_item(item_id, kind):
            print(f"🗑️  Deleted {kind} {item_id}")
        else:
            print(f"❌ No {kind} with id {item_id}")
        return

    items = history.get_user_history(user.email)
    if not items:
        print("ℹ️  No history yet.")
    for item in items:
        print(f"{item.date:%Y-%m-%d %H:%M}  [{item.kind}] {item.id}  {item.title} {item.subtitle}")


def cmd_admin(config, store, auth, args):
    directory = UserDirectory(store)
    directory.validate_admin_pin(_option(args, "--pin") or "")

    positional = _positionals(args)
    action = positional[0] if positional else "list"
    if action == "list":
        emails = directory.list_approved_emails()
    elif action in ("add", "remove") and len(positional) > 1:
        if action == "add":
            emails = directory.add_approved_email(positional[1])
        else:
            emails = directory.remove_approved_email(positional[1])
    else:
        print("❌ Usage: admin --pin PIN (list | add EMAIL | remove EMAIL)")
        sys.exit(2)

    print(f"👥 {len(emails)} approved user(s):")
    for email in emails:
        print(f"   {email}")


def _display_analysis(result):
    print("\n" + "=" * 50)
    print(f"🎯 MATCH SCORE: {result.match_score}/100")
    print("=" * 50)
    for point in result.match_explanation:
        print(f"   • {point}")
    if result.suggested_improvements:
        print("\n🔧 Suggested improvements:")
        for item in result.suggested_improvements:
            print(f"   [{item.section}] ({item.confidence_score}%)")
            print(f"      - {item.original}")
            print(f"      + {item.suggestion}")
            print(f"      ({item.reason})")
    if result.critical_additions:
        print("\n➕ Critical additions:")
        for addition in result.critical_additions:
            print(f"   • {addition}")
    if result.missing_keywords:
        print("\n🔑 Missing keywords: " + ", ".join(
            f"{k.keyword} ({k.importance})" for k in result.missing_keywords))


COMMANDS = {
    "signin": cmd_signin,
    "signout": cmd_signout,
    "interview": cmd_interview,
    "analyze": cmd_analyze,
    "profile": cmd_profile,
    "history": cmd_history,
    "admin": cmd_admin,
}


def main():
    """Command-line interface for the interview coach."""
    args = sys.argv[1:]
    if not args or args[0] in ("-h", "--help") or args[0] not in COMMANDS:
        print(USAGE)
        sys.exit(0 if args and args[0] in ("-h", "--help") else 2)

    # Load configuration from environment
    try:
        config = get_config()
    except ValueError as e:
        print(f"❌ Configuration Error: {e}")
        sys.exit(1)

    setup_logging(config.log_file, config.log_level)
    store = create_document_store(config)
    auth = AuthSession(UserDirectory(store), config.session_file)

    try:
        COMMANDS[args[0]](config, store, auth, args[1:])
    except (CoachError, ValueError, FileNotFoundError) as e:
        print(f"❌ {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
