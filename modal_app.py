"""
Modal app for the SMS chat relay.

The Twilio webhook answers immediately and spawns a separate Modal function
to generate and send the reply, so a slow completion never holds up the
webhook response.
"""

import modal

# Create Modal app
app = modal.App("sms-chat")

# Define the container image with all dependencies and source code
image = (
    modal.Image.debian_slim(python_version="3.12")
    .pip_install(
        "psycopg2-binary>=2.9.11",
        "requests>=2.31.0",
        "fastapi>=0.115.0",
        "openai>=1.40.0",
    )
    .add_local_python_source("chat")
    .add_local_python_source("llm")
    .add_local_python_source("sms")
)

# Define secrets
# To set these up, run:
# modal secret create neon-db DATABASE_URL=<connection-string>
# modal secret create twilio-credentials TWILIO_ACCOUNT_SID=<sid> TWILIO_AUTH_TOKEN=<token>
# modal secret create openai-credentials OPENAI_API_KEY=<key> OPENAI_MODEL=gpt-4
secrets = [
    modal.Secret.from_name("neon-db"),
    modal.Secret.from_name("twilio-credentials"),
    modal.Secret.from_name("openai-credentials"),
]


@app.function(image=image, secrets=secrets, timeout=600)
def reply_to_sms(job_data: dict):
    """
    Generate and send the reply to one inbound SMS.

    Spawned by the webhook and never awaited by it, so it keeps running after
    the webhook has answered Twilio.

    Args:
        job_data: ReplyJob.to_dict() output
    """
    import os

    from chat.session import ConversationStore, PostgresSessionStore
    from chat.webhook import ReplyJob, reply_with_completion
    from llm.completion import CompletionClient
    from sms.twilio import TwilioClient

    job = ReplyJob.from_dict(job_data)

    report = reply_with_completion(
        job,
        store=ConversationStore(PostgresSessionStore()),
        completion_client=CompletionClient(),
        sms_client=TwilioClient(),
        send_error_reply=os.getenv("SMS_ERROR_REPLY", "false").lower() == "true",
    )

    return {"sent": len(report.sent), "failed": len(report.failed)}


@app.function(image=image, secrets=secrets)
def get_stats():
    """Get conversation statistics."""
    from chat.session import PostgresSessionStore

    sessions = PostgresSessionStore()
    stats = {"conversations": sessions.count()}

    print("\n📊 Conversation Statistics:")
    print(f"   Stored conversations: {stats['conversations']}")

    return stats


@app.function(image=image, secrets=secrets)
def init_database():
    """Create the conversation_sessions table."""
    from chat.session import PostgresSessionStore

    PostgresSessionStore().init_database()
    print("✓ conversation_sessions table ready")
    return {"status": "success"}


# ==================== Twilio SMS Webhook ====================


@app.function(image=image, secrets=secrets)
@modal.asgi_app()
def chat_sms_webhook():
    """
    Twilio SMS webhook endpoint.

    Configure this URL as the "A message comes in" webhook of your Twilio
    phone number.
    """
    from chat.session import ConversationStore, PostgresSessionStore
    from chat.web import create_web_app
    from sms.twilio import TwilioClient

    def dispatch(job):
        reply_to_sms.spawn(job.to_dict())

    return create_web_app(
        store=ConversationStore(PostgresSessionStore()),
        sms_client=TwilioClient(),
        dispatch=dispatch,
    )


@app.local_entrypoint()
def main(command: str = "stats"):
    """
    Local CLI for testing Modal functions.

    Usage:
        modal run modal_app.py --command=stats
        modal run modal_app.py --command=init-db
    """
    if command == "stats":
        get_stats.remote()
    elif command == "init-db":
        init_database.remote()
    else:
        print(f"Unknown command: {command}")
        print("Available commands: stats, init-db")
