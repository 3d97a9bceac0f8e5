import atexit

from flask_socketio import SocketIO, join_room

from spiderhub import create_app
from spiderhub.shared.event_bus import EventBus
from spiderhub.shared.event_handlers.logging_handler import LoggingEventHandler
from spiderhub.shared.event_handlers.websocket_handler import WebSocketEventHandler
from spiderhub.shared.logging_config import add_websocket_handler, setup_logging
from spiderhub.shared.settings import load_settings

settings = load_settings()
setup_logging(settings)

# 事件总线：业务日志写文件，同时推送到订阅该任务的前端
event_bus = EventBus()
event_bus.subscribe_to_all(LoggingEventHandler().handle)

app = create_app(settings=settings, event_bus=event_bus)
socketio = SocketIO(app, cors_allowed_origins="*")

add_websocket_handler(socketio)
event_bus.subscribe_to_all(WebSocketEventHandler(socketio).handle)


@socketio.on('join', namespace='/task')
def on_join(data):
    room = data.get('room')
    if room:
        join_room(str(room))


atexit.register(app.extensions["task_service"].shutdown)


if __name__ == '__main__':
    socketio.run(app, port=5000)
