############################################################
# FlatCAM: 2D Post-processing for Manufacturing            #
# http://flatcam.org                                       #
# Author: Juan Pablo Caram (c)                             #
# Date: 2/5/2014                                           #
# MIT Licence                                              #
############################################################

import traceback

from PyQt6.QtCore import QObject, pyqtSignal, QThread, Qt

from .errors import BoardBusy, CompositionCancelled
from .geometry import compose_board_area
from .utils import setup_log


log = setup_log("gpCamlib.worker")


class BoardAreaWorker(QObject):
    """
    Composes the board area of a program, usually from a QThread.
    The program must not change while this runs.
    """

    progress = pyqtSignal(float)            # completed fraction, 0 to 1
    finished = pyqtSignal(object)           # shapely geometry
    failed = pyqtSignal(str)

    def __init__(self, program, name='Compositor'):
        super().__init__()

        self.program = program
        self.name = name
        self._cancelled = False

    def cancel(self):
        """
        Asks a running composition to stop before its next item.
        Safe to call from any thread.
        """
        self._cancelled = True

    def is_cancelled(self):
        return self._cancelled

    def run(self):
        log.debug("%s: composing %d items" % (self.name, len(self.program)))
        try:
            area = compose_board_area(self.program, on_progress=self.progress.emit,
                                      cancelled=self.is_cancelled)
        except CompositionCancelled as err:
            self.failed.emit(str(err))
        except Exception as err:
            log.error("%s: composition failed\n%s" % (self.name, traceback.format_exc()))
            self.failed.emit(repr(err))
        else:
            self.finished.emit(area)


class WorkerStack(QObject):
    """
    Runs one composition at a time on its own thread.
    """

    task_completed = pyqtSignal(str)         # worker name

    def __init__(self):
        super().__init__()

        self.worker = None
        self.thread = None
        self.running = False

    def __del__(self):
        if self.thread is not None:
            self.thread.quit()
            self.thread.wait()

    def add_task(self, program, on_progress=None, on_finished=None, on_failed=None):
        """
        Starts composing ``program`` on a new thread.

        :raises BoardBusy: if a composition is still running.
        :return: The worker, to connect more slots or cancel it.
        :rtype: BoardAreaWorker
        """
        if self.running:
            raise BoardBusy("A composition is already running")

        if self.thread is not None:
            self.thread.wait()

        worker = BoardAreaWorker(program, 'Compositor-' + str(id(program)))
        thread = QThread()
        thread.setObjectName(worker.name)

        worker.moveToThread(thread)
        thread.started.connect(worker.run)
        if on_progress is not None:
            worker.progress.connect(on_progress)
        if on_finished is not None:
            worker.finished.connect(on_finished)
        if on_failed is not None:
            worker.failed.connect(on_failed)
        worker.finished.connect(self.on_task_completed)
        worker.failed.connect(self.on_task_completed)

        # Stops the thread from the worker side, no event loop needed.
        worker.finished.connect(thread.quit, Qt.ConnectionType.DirectConnection)
        worker.failed.connect(thread.quit, Qt.ConnectionType.DirectConnection)

        self.worker = worker
        self.thread = thread
        self.running = True
        thread.start()
        return worker

    def on_task_completed(self, *args):
        self.running = False
        self.task_completed.emit(self.worker.name)
