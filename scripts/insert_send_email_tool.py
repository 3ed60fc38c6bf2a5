"""
Script to insert the send-email tool into the catalog.
"""
import sys
import os

# Add parent directory to path to import app modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from app.core.database import SessionLocal
from app.models.tool import Tool

TOOL_NAME = "send-email"
TOOL_DESCRIPTION = (
    "Sends an email with a summary of the conversation. Use this whenever the "
    "caller asks to receive information by email."
)
TOOL_URL = os.environ.get("SEND_EMAIL_TOOL_URL", "http://localhost:3000/send-email")
SCHEMA_TEMPLATE = {
    "api_schema": {
        "url": TOOL_URL,
        "method": "POST",
        "request_body_schema": {
            "properties": [
                {"id": "sender_email", "type": "string", "value_type": "constant_value", "required": True},
                {"id": "subject", "type": "string", "value_type": "constant_value", "required": True},
                {"id": "recipient_email", "type": "string", "value_type": "llm_prompt", "required": True},
                {"id": "body", "type": "string", "value_type": "llm_prompt", "required": True},
            ]
        },
    }
}


def insert_send_email_tool():
    """Insert or refresh the send-email tool."""
    db = SessionLocal()
    try:
        tool = db.query(Tool).filter(Tool.name == TOOL_NAME).first()

        if tool:
            print(f"Tool '{TOOL_NAME}' already exists with ID: {tool.id}")
            tool.description = TOOL_DESCRIPTION
            tool.deployment_url = TOOL_URL
            tool.schema_template = SCHEMA_TEMPLATE
            db.commit()
            print(f"Updated existing '{TOOL_NAME}' tool")
        else:
            tool = Tool(
                name=TOOL_NAME,
                description=TOOL_DESCRIPTION,
                deployment_url=TOOL_URL,
                schema_template=SCHEMA_TEMPLATE,
            )
            db.add(tool)
            db.commit()
            print(f"Created '{TOOL_NAME}' tool with ID: {tool.id}")

    except Exception as e:
        print(f"Error: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    print(f"Inserting '{TOOL_NAME}' tool into database...")
    insert_send_email_tool()
