import logging

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from extensions import db
from exceptions import DependentRecordsExist, DuplicateKey, NotFound
from models.application import Application
from models.document import Document
from models.population import Population
from services import audit
from time_utils import utcnow

logger = logging.getLogger(__name__)

TABLE = "population"


def create(data, actor_id):
    if find_by_nik(data.nik):
        raise DuplicateKey(f"NIK {data.nik} already registered")

    population = Population(**data.model_dump(), created_by=actor_id)
    db.session.add(population)
    try:
        db.session.commit()
    except IntegrityError:
        # NIK yang sama masuk bersamaan dari request lain
        db.session.rollback()
        raise DuplicateKey(f"NIK {data.nik} already registered")

    logger.info("Population %s created (NIK %s) by user %s", population.id, population.nik, actor_id)
    audit.record(actor_id, "CREATE", TABLE, population.id, new_values=population.to_dict())
    return population


def update(population_id, data, actor_id):
    population = db.session.get(Population, population_id)
    if not population:
        raise NotFound("Population record not found")

    changes = data.model_dump(exclude_unset=True)
    before = population.to_dict()
    for field, value in changes.items():
        setattr(population, field, value)
    population.updated_at = utcnow()
    db.session.commit()

    after = population.to_dict()
    audit.record(
        actor_id, "UPDATE", TABLE, population.id,
        old_values={k: before[k] for k in changes},
        new_values={k: after[k] for k in changes},
    )
    return population


def get(population_id):
    return db.session.get(Population, population_id)


def find_by_nik(nik):
    return Population.query.filter_by(nik=nik).first()


def filtered(filters):
    query = Population.query

    if filters.search:
        # % dan _ dicari apa adanya, bukan sebagai wildcard
        query = query.filter(or_(
            Population.nama_lengkap.icontains(filters.search, autoescape=True),
            Population.nik.icontains(filters.search, autoescape=True),
        ))
    if filters.kelurahan:
        query = query.filter(Population.kelurahan == filters.kelurahan)
    if filters.kecamatan:
        query = query.filter(Population.kecamatan == filters.kecamatan)
    if filters.kabupaten:
        query = query.filter(Population.kabupaten == filters.kabupaten)

    return query.order_by(Population.created_at.desc(), Population.id.desc())


def list_population(query):
    base = filtered(query)
    total = base.order_by(None).count()
    rows = base.offset((query.page - 1) * query.limit).limit(query.limit).all()
    return {"data": rows, "total": total}


def delete(population_id, actor_id):
    population = db.session.get(Population, population_id)
    if not population:
        return False

    documents = Document.query.filter_by(population_id=population_id).count()
    applications = Application.query.filter_by(population_id=population_id).count()
    if documents or applications:
        raise DependentRecordsExist(
            f"Population record still has {documents} document(s) and {applications} application(s)"
        )

    snapshot = population.to_dict()
    db.session.delete(population)
    db.session.commit()

    logger.info("Population %s (NIK %s) deleted by user %s", population_id, snapshot["nik"], actor_id)
    audit.record(actor_id, "DELETE", TABLE, population_id, old_values=snapshot)
    return True
