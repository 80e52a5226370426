"""Dev seeding of a small statute corpus for local runs.

Run against a SQL database with:

    DATABASE_URL=sqlite+aiosqlite:///legal.db python -m backend.legal_assistant.db.seed_dev
"""

import asyncio
import logging

from backend.legal_assistant.config import get_settings
from backend.legal_assistant.db.engine import (
    create_all,
    create_async_engine_from_settings,
    create_session_factory,
)
from backend.legal_assistant.db.sql_repositories import SqlDocumentStore
from backend.legal_assistant.models.common import Category, DocumentType
from backend.legal_assistant.models.documents import Article, LegalDocument, RelatedLaw

logger = logging.getLogger(__name__)

ELECTRICITY_LAW_ID = "jo-electricity-law-2025"
PENAL_CODE_ID = "jo-penal-code-1960"
CIVIL_CODE_ID = "jo-civil-code-1976"


def dev_documents() -> list[LegalDocument]:
    """Documents loaded into the in-memory store when seeding is enabled."""
    return [
        LegalDocument(
            document_id=ELECTRICITY_LAW_ID,
            title="Jordanian Electricity Law",
            title_arabic="قانون الكهرباء الأردني",
            category=Category.administrative,
            type=DocumentType.other,
            official_number="LAW-10-2025",
            summary="قانون ينظم قطاع الكهرباء في المملكة الأردنية الهاشمية",
            articles=[
                Article(
                    number="1",
                    title="التسمية والنفاذ",
                    content="يسمى هذا القانون (قانون الكهرباء) ويعمل به من تاريخ نشره في الجريدة الرسمية.",
                    keywords=["تسمية", "نفاذ", "قانون الكهرباء"],
                ),
                Article(
                    number="27",
                    title="عقوبة الاعتداء على مسافات السماح الكهربائي",
                    content=(
                        "أ- يعاقب كل من يقوم بالاعتداء على مسافات السماح الكهربائي بغرامة لا تقل "
                        "عن خمسمائة دينار ولا تزيد على ألف دينار وتضاعف العقوبة في حال التكرار.\n"
                        "ب- يعتبر مالك العقار مسؤولا عن أي اعتداء على مسافات السماح الكهربائي ما لم "
                        "يثبت قيام الغير بإجراء هذا الاعتداء.\n"
                        "ج- يجوز للمرخص له إجراء تسوية مالية مع مالك العقار أو المعتدي شريطة قيامه "
                        "بتعويض المرخص له عن الأضرار التي لحقت به ودفع الحد الأدنى من الغرامة قبل "
                        "قيام النيابة العامة بإحالة الأمر إلى المحكمة المختصة."
                    ),
                    keywords=["عقوبة", "اعتداء", "مسافات السماح", "كهربائي", "غرامة"],
                ),
            ],
            related_laws=[
                RelatedLaw(
                    document_id=PENAL_CODE_ID,
                    relationship="references",
                    description="Penalties not set by this law follow the penal code",
                )
            ],
        ),
        LegalDocument(
            document_id=PENAL_CODE_ID,
            title="Jordanian Penal Code",
            title_arabic="قانون العقوبات الأردني",
            category=Category.criminal,
            type=DocumentType.criminal_code,
            official_number="LAW-16-1960",
            summary="القانون الذي يحدد الجرائم والعقوبات المقررة لها في المملكة الأردنية الهاشمية",
            articles=[
                Article(
                    number="3",
                    title="شرعية الجرائم والعقوبات",
                    content="لا جريمة ولا عقوبة إلا بنص قانوني.",
                    keywords=["جريمة", "عقوبة", "نص"],
                ),
                Article(
                    number="326",
                    title="القتل القصد",
                    content="من قتل إنساناً قصداً عوقب بالأشغال عشرين سنة.",
                    keywords=["قتل", "قصد", "أشغال"],
                ),
            ],
        ),
        LegalDocument(
            document_id=CIVIL_CODE_ID,
            title="Jordanian Civil Code",
            title_arabic="القانون المدني الأردني",
            category=Category.civil,
            type=DocumentType.civil_code,
            official_number="LAW-43-1976",
            summary=None,
            articles=[
                Article(
                    number="87",
                    title="تعريف العقد",
                    content=(
                        "العقد هو ارتباط الإيجاب الصادر من أحد المتعاقدين بقبول الآخر وتوافقهما "
                        "على وجه يثبت أثره في المعقود عليه."
                    ),
                    keywords=["عقد", "إيجاب", "قبول"],
                ),
                Article(
                    number="256",
                    title="المسؤولية عن الفعل الضار",
                    content="كل إضرار بالغير يلزم فاعله ولو غير مميز بضمان الضرر.",
                    keywords=["ضرر", "تعويض", "ضمان"],
                ),
            ],
        ),
    ]


async def seed_dev_documents(store: SqlDocumentStore) -> int:
    """Insert the dev corpus into a SQL store.

    This function is idempotent - documents already present are skipped.

    Returns:
        Number of documents inserted
    """
    inserted = 0
    for document in dev_documents():
        if await store.get(document.document_id) is not None:
            logger.info(f"Dev document already exists: {document.document_id}")
            continue
        await store.add(document)
        inserted += 1
        logger.info(f"Created dev document {document.document_id}")
    return inserted


async def main() -> None:
    engine = create_async_engine_from_settings(get_settings())
    await create_all(engine)
    store = SqlDocumentStore(create_session_factory(engine))
    inserted = await seed_dev_documents(store)
    logger.info(f"Seeded {inserted} dev document(s)")
    await engine.dispose()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
