import logging
import os
import sys


class CustomExtraLogAdapter(logging.LoggerAdapter):
    def process(self, msg, kwargs):
        my_context = kwargs.pop("extra", self.extra["extra"])
        return "[%s] %s" % (my_context, msg), kwargs


def get_logger(name, level=None) -> logging.Logger:

    FORMAT = "[%(levelname)s  %(name)s %(module)s:%(lineno)s - %(funcName)s() - %(asctime)s]\n\t %(message)s \n"
    TIME_FORMAT = "%d.%m.%Y %I:%M:%S %p"

    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO").upper()

    # file logging is opt-in, stdout is always on
    logging.basicConfig(
        format=FORMAT,
        datefmt=TIME_FORMAT,
        level=level,
        filename=os.getenv("LOG_FILE") or None,
    )

    logger_instance = logging.getLogger(name)

    if not logger_instance.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        logger_instance.addHandler(handler)

    logger_instance = CustomExtraLogAdapter(logger_instance, {"extra": None})

    return logger_instance


logger = get_logger("kurasyit")
