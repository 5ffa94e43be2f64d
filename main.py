import click
from dotenv import load_dotenv

from chat.chunker import MAX_SEGMENT_LENGTH, split_text_into_messages
from chat.session import ConversationStore, MemorySessionStore, PostgresSessionStore

# Load environment variables from .env file
load_dotenv()


def get_store(memory: bool) -> ConversationStore:
    """Conversation store backed by Postgres, or by a throwaway dict with --memory."""
    if memory:
        return ConversationStore(MemorySessionStore())
    return ConversationStore(PostgresSessionStore())


@click.group()
def cli():
    """SMS chat relay"""
    pass


@cli.command()
@click.argument("text_file", type=click.File("r"))
@click.option("--max-length", default=MAX_SEGMENT_LENGTH, show_default=True, help="Maximum SMS length")
def chunk(text_file, max_length: int):
    """Show how a text file would be split into SMS messages."""
    segments = split_text_into_messages(text_file.read(), max_length=max_length)

    click.echo(f"{len(segments)} message(s):\n")
    for idx, segment in enumerate(segments, 1):
        marker = " ⚠️ over limit" if len(segment) > max_length else ""
        click.echo(f"--- {idx} ({len(segment)} chars){marker}")
        click.echo(segment)
        click.echo()


@cli.command()
@click.argument("phone_number")
@click.option("--memory", is_flag=True, help="Use an in-memory store instead of Postgres")
def history(phone_number: str, memory: bool):
    """Show the stored conversation for a phone number."""
    store = get_store(memory)
    messages = store.load(phone_number)

    if not messages:
        click.echo(f"No conversation stored for {phone_number}")
        return

    click.echo(f"{len(messages)} message(s):\n")
    for message in messages:
        click.echo(f"[{message.role.value}] {message.content}\n")


@cli.command()
@click.argument("phone_number")
@click.option("--memory", is_flag=True, help="Use an in-memory store instead of Postgres")
def reset(phone_number: str, memory: bool):
    """Clear the stored conversation for a phone number."""
    store = get_store(memory)
    store.clear(phone_number)
    click.echo(f"✓ Conversation cleared for {phone_number}")


@cli.command()
@click.argument("phone_number")
@click.argument("message")
@click.option("--send", is_flag=True, help="Send the reply through Twilio")
@click.option("--from-number", help="Twilio number to send from (required with --send)")
@click.option("--memory", is_flag=True, help="Use an in-memory store instead of Postgres")
def ask(phone_number: str, message: str, send: bool, from_number: str, memory: bool):
    """
    Run one conversation turn as if PHONE_NUMBER had texted MESSAGE.

    The reply is printed as it would be split into SMS messages. With --send
    it's also delivered to PHONE_NUMBER.
    """
    from chat.webhook import InboundMessage, ReplyJob, handle_incoming_sms, reply_with_completion
    from llm.completion import CompletionClient
    from llm.errors import CompletionError

    if send and not from_number:
        click.echo("Error: --from-number is required with --send", err=True)
        raise click.Abort()

    store = get_store(memory)
    completion_client = CompletionClient()

    if send:
        from sms.twilio import TwilioClient

        sms_client = TwilioClient()
    else:
        sms_client = EchoSmsClient()

    jobs: list[ReplyJob] = []
    state = handle_incoming_sms(
        InboundMessage(from_number=phone_number, to_number=from_number or "", body=message.strip()),
        store=store,
        sms_client=sms_client,
        dispatch=jobs.append,
    )
    if state == "reset":
        return

    try:
        report = reply_with_completion(
            jobs[0],
            store=store,
            completion_client=completion_client,
            sms_client=sms_client,
            delay=1.0 if send else 0,
        )
    except CompletionError as e:
        click.echo(f"Error: {e}", err=True)
        raise click.Abort()

    if not report.ok:
        click.echo(f"⚠️ {len(report.failed)} message(s) failed to send", err=True)


class EchoSmsClient:
    """Prints messages instead of sending them."""

    def __init__(self):
        self.count = 0

    def send_message(self, to: str, from_: str, body: str) -> str:
        self.count += 1
        click.echo(f"\n--- SMS {self.count} ({len(body)} chars)")
        click.echo(body)
        return f"local-{self.count}"


if __name__ == "__main__":
    cli()
