import os

from commute_timely.main import main
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="service")


if __name__ == "__main__":
    if not os.getenv("COMMUTE_DESTINATIONS_FILE"):
        logger.warning("COMMUTE_DESTINATIONS_FILE not set; the service will run with no destinations")
    main()
