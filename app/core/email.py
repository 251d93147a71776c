from fastapi_mail import FastMail, MessageSchema, ConnectionConfig, MessageType
from app.core.config import settings
from app.schemas.product import ProductRecord


def mail_configured() -> bool:
    return bool(settings.MAIL_SERVER and settings.MAIL_FROM and settings.STOCK_ALERT_EMAIL)


def _connection() -> ConnectionConfig:
    return ConnectionConfig(
        MAIL_USERNAME=settings.MAIL_USERNAME or "",
        MAIL_PASSWORD=settings.MAIL_PASSWORD or "",
        MAIL_FROM=settings.MAIL_FROM,
        MAIL_PORT=settings.MAIL_PORT,
        MAIL_SERVER=settings.MAIL_SERVER,
        MAIL_STARTTLS=True,
        MAIL_SSL_TLS=False,
        USE_CREDENTIALS=bool(settings.MAIL_USERNAME),
        VALIDATE_CERTS=True
    )


def render_low_stock(product: ProductRecord) -> str:
    return f"""
    <html>
        <body style="font-family: Arial, sans-serif; color: #333;">
            <div style="background-color: #f4f4f4; padding: 20px;">
                <div style="background-color: white; padding: 20px; border-radius: 8px; max-width: 500px; margin: auto;">
                    <h2 style="color: #d9534f;">Low Stock: {product.name}</h2>
                    <p>Barcode: {product.barcode or "-"}</p>
                    <p>Current stock: <strong>{product.stock}</strong> (minimum {product.min_stock})</p>
                    <p style="margin-top: 20px; font-size: 12px; color: #777;">
                        Restock this product or lower its minimum stock to silence this alert.
                    </p>
                </div>
            </div>
        </body>
    </html>
    """


async def send_low_stock_email(email_to: str, product: ProductRecord):
    """
    Sends a styled HTML low-stock alert.
    """
    message = MessageSchema(
        subject=f"Low stock: {product.name}",
        recipients=[email_to],
        body=render_low_stock(product),
        subtype=MessageType.html
    )

    fm = FastMail(_connection())
    await fm.send_message(message)
    return True
