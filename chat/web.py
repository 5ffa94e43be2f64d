"""FastAPI app for the Twilio SMS webhook."""

import traceback

from fastapi import FastAPI, Request
from fastapi.responses import Response

from chat.session import ConversationStore
from chat.webhook import EMPTY_TWIML, InboundMessage, handle_incoming_sms, parse_twilio_request


def create_web_app(store: ConversationStore, sms_client, dispatch) -> FastAPI:
    """
    Build the webhook app.

    Twilio sends POST requests with form-encoded data including:
    - From: Sender phone number
    - To: The Twilio number that received the message
    - Body: Message text

    The webhook always answers 200 with an empty TwiML response. Replies go
    out separately through the Twilio API once they're generated.
    """
    web_app = FastAPI()

    @web_app.post("/")
    async def handle_sms(request: Request):
        print("📨 Received webhook request")

        body = await request.body()

        try:
            data = parse_twilio_request(body)
            handle_incoming_sms(
                InboundMessage.from_twilio(data),
                store=store,
                sms_client=sms_client,
                dispatch=dispatch,
            )
        except Exception as e:
            # Twilio retries on errors, which would repeat the message
            print(f"❌ Error processing message: {e}")
            traceback.print_exc()

        return Response(content=EMPTY_TWIML, media_type="application/xml")

    @web_app.get("/")
    async def health_check():
        return {"status": "ok", "service": "sms-chat-webhook"}

    return web_app
