import os
import flask
import logging, logging.handlers

DEFAULT_CONFIG = {
    "ENV": "production",
    "LOG_FILE": None,
    "DEFAULT_ROUND": "R1",
    "DEFAULT_SOLVER": "Greedy",
    "R2_NUM_REVIEWS": None,
    "SOLVER_TIME_LIMIT": None,
}


def configure_logger(app):
    '''
    Configures the app's logger object.
    '''
    app.logger.removeHandler(flask.logging.default_handler)
    formatter = logging.Formatter(
        '%(asctime)s %(levelname)s: [in %(pathname)s:%(lineno)d] %(threadName)s %(message)s')

    if app.config.get('LOG_FILE'):
        file_handler = logging.handlers.RotatingFileHandler(
            filename=app.config['LOG_FILE'],
            mode='a',
            maxBytes=1*1000*1000,
            backupCount=20)

        file_handler.setFormatter(formatter)
        file_handler.setLevel(logging.DEBUG)
        app.logger.addHandler(file_handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    stream_handler.setLevel(logging.DEBUG)

    if app.config.get('ENV') == 'development':
        app.logger.addHandler(stream_handler)

    app.logger.setLevel(logging.DEBUG)
    app.logger.debug('Starting app')

    return app.logger


def create_app(config=None, config_file=None):
    '''
    Builds the main app object.

    Implements the "app factory" pattern, recommended by Flask documentation.
    '''

    app = flask.Flask(__name__, instance_relative_config=True)
    app.config.from_mapping(DEFAULT_CONFIG)

    if config:
        app.config.from_mapping(config)
    elif config_file:
        app.config.from_pyfile(config_file)
    else:
        app.config.from_pyfile('config.cfg', silent=True)

    try:
        os.makedirs(app.instance_path)
    except OSError:
        pass

    configure_logger(app)
    app.logger.debug('Configuration loaded from {}'.format(
        'mapping' if config else config_file or 'config.cfg'))

    # The placement of this import statement is important!
    # It must come after the app is initialized, and imported in the same scope.
    from . import routes
    app.register_blueprint(routes.BLUEPRINT)

    return app
