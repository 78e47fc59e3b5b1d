"""
Catalogue of FIAS record kinds.

Maps a classification key to its target table, XML element name and ordered
column list. Column names must already match the destination tables.
"""

from typing import Dict, Tuple
from schemas.record import ColumnType, RecordSchema, column

INT = ColumnType.INTEGER
BYTE = ColumnType.BYTE


def _schema(key: str, table: str, element: str, *columns) -> RecordSchema:
    return RecordSchema(
        key=key,
        tag=f"AS_{key}",
        table=table,
        element=element,
        columns=tuple(columns),
    )


# Shared column groups
_TAX_CODES = (
    column("IFNSFL"),
    column("TERRIFNSFL"),
    column("IFNSUL"),
    column("TERRIFNSUL"),
    column("OKATO"),
    column("OKTMO"),
    column("UPDATEDATE"),
)

_ADDRESS_OBJECT = (
    column("AOGUID"),
    column("FORMALNAME"),
    column("REGIONCODE"),
    column("AUTOCODE"),
    column("AREACODE"),
    column("CITYCODE"),
    column("CTARCODE"),
    column("PLACECODE"),
    column("STREETCODE"),
    column("EXTRCODE"),
    column("SEXTCODE"),
    column("OFFNAME"),
    column("POSTALCODE"),
    *_TAX_CODES,
    column("SHORTNAME"),
    column("AOLEVEL", INT),
    column("PARENTGUID"),
    column("AOID"),
    column("PREVID"),
    column("NEXTID"),
    column("CODE"),
    column("PLAINCODE"),
    column("ACTSTATUS", INT),
    column("CENTSTATUS", INT),
    column("OPERSTATUS", INT),
    column("CURRSTATUS", INT),
    column("STARTDATE"),
    column("ENDDATE"),
    column("NORMDOC"),
    column("LIVESTATUS", BYTE),
    column("CADNUM"),
    column("DIVTYPE", INT),
)

_HOUSE = (
    column("POSTALCODE"),
    column("REGIONCODE"),
    *_TAX_CODES,
    column("HOUSENUM"),
    column("ESTSTATUS", INT),
    column("BUILDNUM"),
    column("STRUCNUM"),
    column("STRSTATUS", INT),
    column("HOUSEID"),
    column("HOUSEGUID"),
    column("AOGUID"),
    column("STARTDATE"),
    column("ENDDATE"),
    column("STATSTATUS", INT),
    column("NORMDOC"),
    column("COUNTER", INT),
    column("CADNUM"),
    column("DVITYPE", INT),
)

_HOUSE_INTERVAL = (
    column("POSTALCODE"),
    *_TAX_CODES,
    column("INTSTART", INT),
    column("INTEND", INT),
    column("HOUSEINTID"),
    column("INTGUID"),
    column("AOGUID"),
    column("STARTDATE"),
    column("ENDDATE"),
    column("INTSTATUS", INT),
    column("NORMDOC"),
    column("COUNTER", INT),
)

_NORMATIVE_DOCUMENT = (
    column("NORMDOCID"),
    column("DOCNAME"),
    column("DOCDATE"),
    column("DOCNUM"),
    column("DOCTYPE", INT),
    column("DOCIMGID", INT),
)


SCHEMAS: Tuple[RecordSchema, ...] = (
    _schema("ACTSTAT", "actual_status", "ActualStatus",
            column("ACTSTATID", INT), column("NAME")),
    _schema("ADDROBJ", "address_objects", "Object", *_ADDRESS_OBJECT),
    _schema("CENTERST", "center_status", "CenterStatus",
            column("CENTERSTID", INT), column("NAME")),
    _schema("CURENTST", "current_status", "CurrentStatus",
            column("CURENTSTID", INT), column("NAME")),
    _schema("DEL_ADDROBJ", "del_address_objects", "Object", *_ADDRESS_OBJECT),
    _schema("DEL_HOUSE", "del_house", "House", *_HOUSE),
    _schema("DEL_HOUSEINT", "del_house_interval", "HouseInterval", *_HOUSE_INTERVAL),
    _schema("DEL_NORMDOC", "del_normative_document", "NormativeDocument", *_NORMATIVE_DOCUMENT),
    _schema("ESTSTAT", "estate_status", "EstateStatus",
            column("ESTSTATID", INT), column("NAME"), column("SHORTNAME")),
    _schema("HOUSE", "house", "House", *_HOUSE),
    _schema("HOUSEINT", "house_interval", "HouseInterval", *_HOUSE_INTERVAL),
    _schema("HSTSTAT", "house_state_status", "HouseStateStatus",
            column("HOUSESTID", INT), column("NAME")),
    _schema("INTVSTAT", "interval_status", "IntervalStatus",
            column("INTVSTATID", INT), column("NAME")),
    _schema("LANDMARK", "landmark", "Landmark",
            column("LOCATION"),
            column("REGIONCODE"),
            column("POSTALCODE"),
            *_TAX_CODES,
            column("LANDID"),
            column("LANDGUID"),
            column("AOGUID"),
            column("STARTDATE"),
            column("ENDDATE"),
            column("NORMDOC"),
            column("CADNUM")),
    _schema("NDOCTYPE", "normative_document_type", "NormativeDocumentType",
            column("NDTYPEID", INT), column("NAME")),
    _schema("NORMDOC", "normative_document", "NormativeDocument", *_NORMATIVE_DOCUMENT),
    _schema("OPERSTAT", "operation_status", "OperationStatus",
            column("OPERSTATID", INT), column("NAME")),
    _schema("SOCRBASE", "address_object_type", "AddressObjectType",
            column("LEVEL", INT),
            column("SCNAME"),
            column("SOCRNAME"),
            column("KOD_T_ST", name="kodtst")),
    _schema("STRSTAT", "structure_status", "StructureStatus",
            column("STRSTATID", INT), column("NAME"), column("SHORTNAME")),
    _schema("STEAD", "steads", "Stead",
            column("STEADGUID"),
            column("NUMBER"),
            column("REGIONCODE"),
            column("POSTALCODE"),
            *_TAX_CODES,
            column("PARENTGUID"),
            column("STEADID"),
            column("PREVID"),
            column("NEXTID"),
            column("OPERSTATUS", INT),
            column("STARTDATE"),
            column("ENDDATE"),
            column("NORMDOC"),
            column("LIVESTATUS", BYTE),
            column("CADNUM"),
            column("DIVTYPE", INT)),
    _schema("ROOM", "rooms", "Room",
            column("ROOMGUID"),
            column("FLATNUMBER"),
            column("FLATTYPE", INT),
            column("ROOMNUMBER"),
            column("ROOMTYPE", INT),
            column("REGIONCODE"),
            column("POSTALCODE"),
            column("UPDATEDATE"),
            column("HOUSEGUID"),
            column("ROOMID"),
            column("PREVID"),
            column("NEXTID"),
            column("STARTDATE"),
            column("ENDDATE"),
            column("LIVESTATUS"),
            column("NORMDOC"),
            column("OPERSTATUS", INT),
            column("CADNUM"),
            column("ROOMCADNUM")),
)

REGISTRY: Dict[str, RecordSchema] = {schema.key: schema for schema in SCHEMAS}

# Deletion variants share a prefix with their generic tags and go first.
CLASSIFICATION_ORDER: Tuple[str, ...] = tuple(
    sorted(REGISTRY, key=lambda key: not key.startswith("DEL_"))
)


def get_schema(key: str) -> RecordSchema:
    """Look up a record schema by classification key"""
    try:
        return REGISTRY[key]
    except KeyError:
        raise KeyError(f"Unknown record kind: {key}") from None
