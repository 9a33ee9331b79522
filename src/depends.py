from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.repositories import (
    SqlAlchemyInvoiceRepository,
    SqlAlchemyInvoiceLineRepository,
    SqlAlchemyInvoiceChargeRepository,
    SqlAlchemyPaymentRepository,
    SqlAlchemyReceiptRepository,
    SqlAlchemySequenceCounterRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.number_sequencer import InvoiceNumberSequencer, ReceiptNumberSequencer
from src.app.services.receipt_issuer import ReceiptIssuer
from src.app.use_cases.invoicing.invoice_state import InvoiceStateLoader

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


def build_state_loader(session: AsyncSession) -> InvoiceStateLoader:
    return InvoiceStateLoader(
        invoice_repo=SqlAlchemyInvoiceRepository(session),
        line_repo=SqlAlchemyInvoiceLineRepository(session),
        charge_repo=SqlAlchemyInvoiceChargeRepository(session),
        payment_repo=SqlAlchemyPaymentRepository(session),
    )


def build_invoice_sequencer(session: AsyncSession) -> InvoiceNumberSequencer:
    return InvoiceNumberSequencer(
        invoice_repo=SqlAlchemyInvoiceRepository(session),
        counter_repo=SqlAlchemySequenceCounterRepository(session),
        default_template=ApplicationConfig.DEFAULT_INVOICE_NUMBER_FORMAT,
    )


def build_receipt_issuer(session: AsyncSession) -> ReceiptIssuer:
    sequencer = ReceiptNumberSequencer(
        receipt_repo=SqlAlchemyReceiptRepository(session),
        counter_repo=SqlAlchemySequenceCounterRepository(session),
        default_template=ApplicationConfig.DEFAULT_RECEIPT_NUMBER_FORMAT,
    )
    return ReceiptIssuer(SqlAlchemyReceiptRepository(session), sequencer)
