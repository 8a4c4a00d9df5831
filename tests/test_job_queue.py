import logging
import threading
from dataclasses import FrozenInstanceError

import pytest

from print_agent.handlers import ESCPOSHandler
from print_agent.job_queue import PrintQueue
from print_agent.models import JobKind, JobState, PrintJob

from .fakes import FakeTransport


def zpl(name):
    return PrintJob(JobKind.ZPL, f'^XA^FD{name}^FS^XZ')


def test_jobs_are_immutable():
    job = zpl('A')
    with pytest.raises(FrozenInstanceError):
        job.payload = 'other'


def test_payload_type_matches_kind():
    with pytest.raises(TypeError):
        PrintJob(JobKind.RAW, 'text')
    with pytest.raises(TypeError):
        PrintJob(JobKind.TEXT, b'bytes')
    assert PrintJob('zpl', '^XA^XZ').kind is JobKind.ZPL


def test_fifo_order(transport, directory):
    q = PrintQueue(transport, directory)
    handles = [q.enqueue(zpl(name)) for name in 'ABC']
    assert all(h.state is JobState.QUEUED for h in handles)

    q.start()
    q.join()
    q.stop(timeout=5)

    assert [data for _, data in transport.sent] == [
        b'^XA^FDA^FS^XZ\r\n', b'^XA^FDB^FS^XZ\r\n', b'^XA^FDC^FS^XZ\r\n',
    ]
    assert all(h.state is JobState.DELIVERED for h in handles)


def test_failed_job_does_not_stop_the_worker(transport, print_queue, caplog):
    transport.fail_calls.add(1)
    with caplog.at_level(logging.ERROR, logger='print_agent'):
        a, b, c = [print_queue.enqueue(zpl(name)) for name in 'ABC']
        print_queue.join()

    assert (a.state, b.state, c.state) == (JobState.DELIVERED, JobState.FAILED, JobState.DELIVERED)
    assert transport.calls == 3
    assert 'did not accept' in b.error
    assert b.job.id in caplog.text
    assert print_queue.running


def test_transport_exception_marks_job_failed(transport, print_queue):
    transport.raise_calls.add(0)
    first = print_queue.enqueue(zpl('A'))
    second = print_queue.enqueue(zpl('B'))

    assert first.wait(5) is JobState.FAILED
    assert 'spooler crashed' in first.error
    assert second.wait(5) is JobState.DELIVERED


def test_failed_jobs_are_not_retried(transport, print_queue):
    transport.offline.add('POS-80')
    handle = print_queue.enqueue(zpl('A'))
    assert handle.wait(5) is JobState.FAILED
    print_queue.join()
    assert transport.calls == 1


def test_job_printer_overrides_preferred(transport, print_queue):
    job = PrintJob(JobKind.ZPL, '^XA^XZ', printer='Zebra-ZD220')
    assert print_queue.enqueue(job).wait(5) is JobState.DELIVERED
    assert transport.sent[0][0] == 'Zebra-ZD220'


def test_no_printer_configured():
    transport = FakeTransport(printers=(), default=None)
    q = PrintQueue(transport)
    q.start()
    handle = q.enqueue(zpl('A'))
    assert handle.wait(5) is JobState.FAILED
    assert handle.error == 'No printer configured'
    q.stop(timeout=5)
    assert transport.calls == 0


def test_dispatch_by_kind(transport, print_queue):
    print_queue.enqueue(PrintJob(JobKind.TEXT, 'hello'))
    print_queue.enqueue(PrintJob(JobKind.RAW, b'\x1b@raw'))
    print_queue.join()

    text, raw = [data for _, data in transport.sent]
    assert text.startswith(ESCPOSHandler.INIT + b'hello\n')
    assert text.endswith(ESCPOSHandler.CUT)
    assert raw == b'\x1b@raw'


def test_one_job_in_flight_with_many_producers(directory):
    transport = FakeTransport(delay=0.005)
    q = PrintQueue(transport, directory)
    q.start()

    def produce(prefix):
        for i in range(10):
            q.enqueue(zpl(f'{prefix}{i}'))

    producers = [threading.Thread(target=produce, args=(p,)) for p in 'WXYZ']
    for t in producers:
        t.start()
    for t in producers:
        t.join()

    q.join()
    q.stop(timeout=5)

    assert transport.calls == 40
    assert transport.max_in_flight == 1


def test_per_producer_order_is_kept(transport, print_queue):
    for i in range(20):
        print_queue.enqueue(zpl(str(i)))
    print_queue.join()
    assert [data for _, data in transport.sent] == [
        f'^XA^FD{i}^FS^XZ\r\n'.encode() for i in range(20)
    ]


def test_direct_send_shares_the_transport_lock(transport, print_queue):
    with print_queue.transport_lock:
        handle = print_queue.enqueue(zpl('A'))
        assert handle.wait(0.2) is JobState.IN_FLIGHT
        assert transport.calls == 0
    assert handle.wait(5) is JobState.DELIVERED
    assert print_queue.send('POS-80', b'direct')
    assert transport.sent[-1] == ('POS-80', b'direct')


def test_start_stop(transport):
    q = PrintQueue(transport)
    assert not q.running
    q.start()
    q.start()
    assert q.running
    assert q.state() == {'queue_len': 0, 'running': True}
    q.stop(timeout=5)
    assert not q.running
