# Seed MongoDB counters after importing leave documents.
#   - counters.leave_request_id.seq  <- current max leaveId
#   - leave_usage (only with --rebuild-usage) <- approved/auto-approved sick/casual days per year
# Usage: set env MONGODB_URI and MONGODB_DB_NAME, then
#   python scripts/init_mongo_counters.py [--rebuild-usage]

import argparse
import logging
import os

from pymongo import MongoClient

MONGODB_URI = os.getenv("MONGODB_URI", "mongodb://mongodb:27017")
MONGODB_DB_NAME = os.getenv("MONGODB_DB_NAME", "lemonpay")

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("init_mongo_counters")


def seed_leave_id(db) -> int:
    max_doc = db["leaves"].find_one(sort=[("leaveId", -1)])
    max_id = int(max_doc["leaveId"]) if max_doc and "leaveId" in max_doc else 0

    db["counters"].update_one(
        {"_id": "leave_request_id"},
        {"$set": {"seq": max_id}},
        upsert=True,
    )
    return max_id


def rebuild_usage(db) -> int:
    """
    leave_usage를 이력 기준으로 다시 만든다. 키 형식은 "{employeeId}:{leaveType}:{year}".
    """
    pipeline = [
        {
            "$match": {
                "leaveType": {"$in": ["sick", "casual"]},
                "status": {"$in": ["approved", "auto-approved"]},
            }
        },
        {
            "$group": {
                "_id": {
                    "employeeId": "$employeeId",
                    "leaveType": "$leaveType",
                    "year": {"$substrBytes": ["$startDate", 0, 4]},
                },
                "used": {"$sum": "$days"},
            }
        },
    ]

    count = 0
    for row in db["leaves"].aggregate(pipeline):
        key = "{employeeId}:{leaveType}:{year}".format(**row["_id"])
        db["leave_usage"].update_one(
            {"_id": key},
            {"$set": {"used": row["used"]}},
            upsert=True,
        )
        count += 1
    return count


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed Lemonpay MongoDB counters")
    parser.add_argument(
        "--rebuild-usage",
        action="store_true",
        help="recompute leave_usage counters used by LEAVE_CAP_GUARD",
    )
    args = parser.parse_args()

    client = MongoClient(MONGODB_URI)
    db = client[MONGODB_DB_NAME]

    max_id = seed_leave_id(db)
    logger.info("Initialized counters.leave_request_id.seq to %s", max_id)

    if args.rebuild_usage:
        count = rebuild_usage(db)
        logger.info("Rebuilt %s leave_usage counters", count)

    client.close()


if __name__ == "__main__":
    main()
