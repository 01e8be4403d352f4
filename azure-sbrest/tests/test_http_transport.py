# -------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for
# license information.
# --------------------------------------------------------------------------

import logging
import pytest
import random
import requests
import ssl
import threading
import time
from azure.sbrest.http_transport import HTTPTransport, apply_jitter, format_proxies
from azure.sbrest.config import ClientConfig, ProxyOptions, RetryPolicy
from azure.sbrest.exceptions import InvalidURL, TransportError
from azure.sbrest.request_builder import ServiceBusRequest

logging.basicConfig(level=logging.DEBUG)

fake_url = "https://test.servicebus.windows.net/test?api-version=2016-07"
fake_server_verification_cert = "__fake_server_verification_cert__"


@pytest.fixture
def request_obj():
    return ServiceBusRequest(
        method="POST", url=fake_url, headers={"Accept": "application/json"}, body=b"hello"
    )


@pytest.fixture
def client_config(credential):
    return ClientConfig(credential=credential, timeout=10)


@pytest.fixture
def mock_sleep(mocker):
    return mocker.patch.object(time, "sleep")


@pytest.fixture
def mock_session_request(mocker, stub_response):
    return mocker.patch.object(
        requests.Session, "request", autospec=True, return_value=stub_response(200)
    )


@pytest.mark.describe("HTTPTransport - Instantiation")
class TestInstantiation(object):
    @pytest.mark.it(
        "Configures TLS/SSL context to use TLS 1.2 or higher, require certificates and check hostname"
    )
    def test_configures_tls_context(self, mocker, client_config):
        mock_ssl_context_constructor = mocker.patch.object(ssl, "SSLContext")
        mock_ssl_context = mock_ssl_context_constructor.return_value

        HTTPTransport(client_config)

        assert mock_ssl_context_constructor.call_count == 1
        assert mock_ssl_context_constructor.call_args == mocker.call(
            protocol=ssl.PROTOCOL_TLS_CLIENT
        )
        assert mock_ssl_context.minimum_version == ssl.TLSVersion.TLSv1_2
        assert mock_ssl_context.check_hostname is True
        assert mock_ssl_context.verify_mode == ssl.CERT_REQUIRED

    @pytest.mark.it("Configures TLS/SSL context using default certificates if no server verification certificate is provided")
    def test_configures_tls_context_with_default_certs(self, mocker, client_config):
        mock_ssl_context = mocker.patch.object(ssl, "SSLContext").return_value

        HTTPTransport(client_config)

        assert mock_ssl_context.load_default_certs.call_count == 1
        assert mock_ssl_context.load_default_certs.call_args == mocker.call()
        assert mock_ssl_context.load_verify_locations.call_count == 0

    @pytest.mark.it(
        "Configures TLS/SSL context with the provided server verification certificate"
    )
    def test_configures_tls_context_with_server_verification_certs(self, mocker, credential):
        mock_ssl_context = mocker.patch.object(ssl, "SSLContext").return_value
        config = ClientConfig(
            credential=credential, server_verification_cert=fake_server_verification_cert
        )

        HTTPTransport(config)

        assert mock_ssl_context.load_verify_locations.call_count == 1
        assert mock_ssl_context.load_verify_locations.call_args == mocker.call(
            cadata=fake_server_verification_cert
        )

    @pytest.mark.it("Creates a single session for all requests, with the HTTPS adapter mounted")
    def test_session(self, client_config):
        transport = HTTPTransport(client_config)
        assert isinstance(transport._session, requests.Session)
        assert transport._session.get_adapter("https://test.servicebus.windows.net") is (
            transport._http_adapter
        )


@pytest.mark.describe("HTTPTransport - .execute()")
class TestExecute(object):
    @pytest.mark.it("Sends the request via the shared session, with the request details")
    def test_sends_request(self, mocker, client_config, request_obj, mock_session_request):
        transport = HTTPTransport(client_config)
        transport.execute(request_obj)
        transport.execute(request_obj)

        assert mock_session_request.call_count == 2
        for call in mock_session_request.call_args_list:
            assert call == mocker.call(
                transport._session,
                "POST",
                fake_url,
                data=b"hello",
                headers={"Accept": "application/json"},
                proxies={},
                timeout=10,
            )

    @pytest.mark.it("Uses the provided timeout for the attempt instead of the configured one")
    def test_timeout_override(self, client_config, request_obj, mock_session_request):
        transport = HTTPTransport(client_config)
        transport.execute(request_obj, timeout=75)
        assert mock_session_request.call_args[1]["timeout"] == 75

    @pytest.mark.it(
        "Passes the attempt timeout to requests as one value, bounding connecting and each read"
    )
    def test_timeout_bounds_connect_and_read(self, client_config, request_obj, mock_session_request):
        transport = HTTPTransport(client_config)
        transport.execute(request_obj)
        timeout = mock_session_request.call_args[1]["timeout"]
        assert not isinstance(timeout, tuple)
        assert timeout == client_config.timeout

    @pytest.mark.it("Sends the request via configured proxies")
    def test_proxies(self, credential, request_obj, mock_session_request):
        proxy_options = ProxyOptions(proxy_type="HTTP", proxy_address="127.0.0.1", proxy_port=8888)
        transport = HTTPTransport(ClientConfig(credential=credential, proxy_options=proxy_options))
        transport.execute(request_obj)
        assert mock_session_request.call_args[1]["proxies"] == {
            "http": "http://127.0.0.1:8888",
            "https": "http://127.0.0.1:8888",
        }

    @pytest.mark.it("Returns the response, whatever its status code, without retrying")
    @pytest.mark.parametrize("status_code", [200, 201, 204, 400, 401, 404, 410, 500, 503])
    def test_returns_response(
        self, mocker, client_config, request_obj, stub_response, mock_sleep, status_code
    ):
        response = stub_response(status_code)
        mock_request = mocker.patch.object(requests.Session, "request", return_value=response)
        transport = HTTPTransport(client_config)

        assert transport.execute(request_obj) is response
        assert mock_request.call_count == 1
        assert mock_sleep.call_count == 0

    @pytest.mark.it("Retries connection errors and timeouts, and returns the response once one succeeds")
    @pytest.mark.parametrize(
        "error",
        [
            pytest.param(requests.exceptions.ConnectionError("refused"), id="ConnectionError"),
            pytest.param(requests.exceptions.ConnectTimeout("connect timeout"), id="ConnectTimeout"),
            pytest.param(requests.exceptions.ReadTimeout("read timeout"), id="ReadTimeout"),
        ],
    )
    def test_retries_then_succeeds(
        self, mocker, client_config, request_obj, stub_response, mock_sleep, error
    ):
        response = stub_response(201)
        mock_request = mocker.patch.object(
            requests.Session, "request", side_effect=[error, error, response]
        )
        transport = HTTPTransport(client_config)

        assert transport.execute(request_obj) is response
        assert mock_request.call_count == 3
        assert mock_sleep.call_count == 2

    @pytest.mark.it("Raises TransportError once all attempts have failed transiently")
    def test_retry_budget_exhausted(self, mocker, client_config, request_obj, mock_sleep):
        error = requests.exceptions.ConnectionError("refused")
        mock_request = mocker.patch.object(requests.Session, "request", side_effect=error)
        transport = HTTPTransport(client_config)

        with pytest.raises(TransportError) as e_info:
            transport.execute(request_obj)
        assert e_info.value.__cause__ is error
        assert mock_request.call_count == 4
        assert mock_sleep.call_count == 3

    @pytest.mark.it("Makes as many attempts as the retry policy allows")
    @pytest.mark.parametrize("max_attempts", [1, 2, 6])
    def test_custom_retry_budget(self, mocker, credential, request_obj, mock_sleep, max_attempts):
        mock_request = mocker.patch.object(
            requests.Session, "request", side_effect=requests.exceptions.Timeout()
        )
        config = ClientConfig(credential=credential, retry_policy=RetryPolicy(max_attempts=max_attempts))
        transport = HTTPTransport(config)

        with pytest.raises(TransportError):
            transport.execute(request_obj)
        assert mock_request.call_count == max_attempts
        assert mock_sleep.call_count == max_attempts - 1

    @pytest.mark.it("Waits an exponentially increasing, jittered delay before each retry")
    def test_backoff(self, mocker, credential, request_obj, mock_sleep):
        mocker.patch.object(
            requests.Session, "request", side_effect=requests.exceptions.ConnectionError()
        )
        mock_uniform = mocker.patch.object(random, "uniform", side_effect=lambda a, b: b)
        policy = RetryPolicy(
            max_attempts=5, initial_delay=1.0, max_delay=4.0, jitter_up=0.25, jitter_down=0.5
        )
        transport = HTTPTransport(ClientConfig(credential=credential, retry_policy=policy))

        with pytest.raises(TransportError):
            transport.execute(request_obj)

        assert mock_uniform.call_args_list == [
            mocker.call(0.5, 1.25),
            mocker.call(1.0, 2.5),
            mocker.call(2.0, 5.0),
            mocker.call(2.0, 5.0),
        ]
        assert mock_sleep.call_args_list == [
            mocker.call(1.25),
            mocker.call(2.5),
            mocker.call(5.0),
            mocker.call(5.0),
        ]

    @pytest.mark.it("Raises InvalidURL without retrying if the URL cannot be requested")
    @pytest.mark.parametrize(
        "error",
        [
            pytest.param(requests.exceptions.InvalidURL(), id="InvalidURL"),
            pytest.param(requests.exceptions.MissingSchema(), id="MissingSchema"),
            pytest.param(requests.exceptions.InvalidSchema(), id="InvalidSchema"),
        ],
    )
    def test_invalid_url(self, mocker, client_config, request_obj, mock_sleep, error):
        mock_request = mocker.patch.object(requests.Session, "request", side_effect=error)
        transport = HTTPTransport(client_config)

        with pytest.raises(InvalidURL) as e_info:
            transport.execute(request_obj)
        assert e_info.value.__cause__ is error
        assert mock_request.call_count == 1

    @pytest.mark.it("Raises TransportError without retrying on TLS failures")
    def test_ssl_error(self, mocker, client_config, request_obj, mock_sleep):
        error = requests.exceptions.SSLError("certificate verify failed")
        mock_request = mocker.patch.object(requests.Session, "request", side_effect=error)
        transport = HTTPTransport(client_config)

        with pytest.raises(TransportError):
            transport.execute(request_obj)
        assert mock_request.call_count == 1
        assert mock_sleep.call_count == 0

    @pytest.mark.it("Raises TransportError without retrying on other request failures")
    def test_other_request_error(self, mocker, client_config, request_obj, mock_sleep):
        error = requests.exceptions.TooManyRedirects()
        mock_request = mocker.patch.object(requests.Session, "request", side_effect=error)
        transport = HTTPTransport(client_config)

        with pytest.raises(TransportError) as e_info:
            transport.execute(request_obj)
        assert e_info.value.__cause__ is error
        assert mock_request.call_count == 1

    @pytest.mark.it("Allows arbitrary exceptions to propagate")
    def test_arbitrary_exception(self, mocker, client_config, request_obj, arbitrary_exception):
        mocker.patch.object(requests.Session, "request", side_effect=arbitrary_exception)
        transport = HTTPTransport(client_config)

        with pytest.raises(type(arbitrary_exception)):
            transport.execute(request_obj)

    @pytest.mark.it("Can be used from multiple threads at once")
    def test_concurrent_use(self, mocker, client_config, request_obj, stub_response, mock_sleep):
        failures = {}
        lock = threading.Lock()

        def flaky_request(*args, **kwargs):
            # Fail the first attempt made by each thread
            name = threading.current_thread().name
            with lock:
                first = name not in failures
                failures[name] = True
            if first:
                raise requests.exceptions.ConnectionError()
            return stub_response(200)

        mocker.patch.object(requests.Session, "request", side_effect=flaky_request)
        transport = HTTPTransport(client_config)
        results = []

        def worker():
            results.append(transport.execute(request_obj).status_code)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results == [200] * 8


@pytest.mark.describe("HTTPTransport - .close()")
class TestClose(object):
    @pytest.mark.it("Closes the session")
    def test_closes_session(self, mocker, client_config):
        transport = HTTPTransport(client_config)
        mock_close = mocker.patch.object(transport._session, "close")
        transport.close()
        assert mock_close.call_count == 1


@pytest.mark.describe("apply_jitter()")
class TestApplyJitter(object):
    @pytest.mark.it("Returns a random value between the jittered bounds of the delay")
    def test_bounds(self):
        policy = RetryPolicy(jitter_up=0.25, jitter_down=0.5)
        for _ in range(100):
            value = apply_jitter(4.0, policy)
            assert 2.0 <= value <= 5.0

    @pytest.mark.it("Returns the delay unchanged if jitter is disabled")
    def test_no_jitter(self):
        policy = RetryPolicy(jitter_up=0, jitter_down=0)
        assert apply_jitter(3.0, policy) == 3.0


@pytest.mark.describe("format_proxies()")
class TestFormatProxies(object):
    @pytest.mark.it("Returns no proxies if no proxy options are provided")
    def test_no_proxy(self):
        assert format_proxies(None) == {}

    @pytest.mark.it("Formats proxies for the requests library, including credentials")
    @pytest.mark.parametrize(
        "proxy_type, scheme",
        [
            pytest.param("HTTP", "http", id="HTTP"),
            pytest.param("SOCKS4", "socks4", id="SOCKS4"),
            pytest.param("SOCKS5", "socks5", id="SOCKS5"),
        ],
    )
    def test_formats(self, proxy_type, scheme):
        options = ProxyOptions(
            proxy_type=proxy_type,
            proxy_address="proxy.local",
            proxy_port=1234,
            proxy_username="user",
            proxy_password="pass",
        )
        expected = "{}://user:pass@proxy.local:1234".format(scheme)
        assert format_proxies(options) == {"http": expected, "https": expected}
