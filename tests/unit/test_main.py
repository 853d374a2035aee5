"""
Unit tests for the deployment pipeline.
"""
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from lambda_uploader.errors import PackagingError, UploadFailedError
from lambda_uploader.futures import completed, failed
from lambda_uploader.lambda_func.function_creator import LambdaFunctionCreator
from lambda_uploader.main import LambdaCreator, LambdaCreatorFactory
from lambda_uploader.models import FunctionUploadDetails, LambdaFunction, UploadedCode
from lambda_uploader.packaging.packager import Artifact, Packager
from lambda_uploader.s3.code_uploader import CodeUploader


class FakePackager(Packager):
    def __init__(self, error=None):
        self.error = error
        self.calls = []
        self.released = []

    def create_package(self, module, source_file):
        self.calls.append((module, source_file))
        if self.error:
            return failed(self.error)
        return completed(Artifact(location=Path(f'/tmp/{Path(module).name}.zip')))

    def supports_runtime(self, runtime):
        return True

    def release(self, artifact):
        self.released.append(artifact)


class FakeUploader:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def upload(self, function_details, code, s3_bucket):
        self.calls.append((function_details, code, s3_bucket))
        if self.error:
            return failed(self.error)
        return completed(UploadedCode(s3_bucket, function_details.archive_key, None))


class FakeFunctionCreator:
    def __init__(self, error=None):
        self.error = error
        self.create_calls = []
        self.update_calls = []

    def create(self, details, uploaded_code):
        self.create_calls.append((details, uploaded_code))
        if self.error:
            return failed(self.error)
        return completed(LambdaFunction(
            name=details.name,
            arn=f'arn:aws:lambda:us-east-1:123:function:{details.name}',
            description=details.description,
            last_modified=None,
            handler=details.handler,
            runtime=details.runtime,
            role=details.role_arn,
            env_variables=details.env_vars,
            timeout=details.timeout,
            memory_size=details.memory_size,
            xray_enabled=False,
            credential_provider_id='default',
            region='us-east-1',
        ))

    def update(self, details, uploaded_code=None, replace_configuration=True):
        self.update_calls.append((details, uploaded_code, replace_configuration))
        if self.error:
            return failed(self.error)
        return completed(None)


def test_create_lambda(function_details):
    """Test that create runs package, upload and create in sequence."""
    packager, uploader, function_creator = FakePackager(), FakeUploader(), FakeFunctionCreator()
    creator = LambdaCreator(packager, uploader, function_creator)

    function = creator.create_lambda('/src/fn1', 'Handler.java', function_details, 'my-bucket').result(timeout=5)

    assert packager.calls == [('/src/fn1', 'Handler.java')]
    assert uploader.calls == [(function_details, Path('/tmp/fn1.zip'), 'my-bucket')]
    assert function_creator.create_calls == [(function_details, UploadedCode('my-bucket', 'fn1.zip', None))]
    assert function.name == 'fn1'
    assert function.runtime == 'java8'


def test_update_lambda(function_details):
    """Test that update passes the uploaded code and the configuration flag on."""
    function_creator = FakeFunctionCreator()
    creator = LambdaCreator(FakePackager(), FakeUploader(), function_creator)

    result = creator.update_lambda('/src/fn1', 'Handler.java', function_details, 'my-bucket').result(timeout=5)

    assert result is None
    assert function_creator.update_calls == [
        (function_details, UploadedCode('my-bucket', 'fn1.zip', None), True)
    ]


def test_update_lambda_code_only(function_details):
    """Test a code-only update."""
    function_creator = FakeFunctionCreator()
    creator = LambdaCreator(FakePackager(), FakeUploader(), function_creator)

    creator.update_lambda('/src/fn1', 'Handler.java', function_details, 'my-bucket', False).result(timeout=5)

    assert function_creator.update_calls[0][2] is False


def test_packaging_failure_short_circuits(function_details):
    """Test that a packaging failure stops the pipeline with the same error."""
    error = PackagingError('no sources')
    uploader, function_creator = FakeUploader(), FakeFunctionCreator()
    creator = LambdaCreator(FakePackager(error), uploader, function_creator)

    future = creator.create_lambda('/src/fn1', 'Handler.java', function_details, 'my-bucket')

    assert future.exception(timeout=5) is error
    assert uploader.calls == []
    assert function_creator.create_calls == []


@pytest.mark.parametrize('flow', ['create', 'update'])
def test_upload_failure_short_circuits(function_details, flow):
    """Test that no lifecycle call happens when the upload fails."""
    error = UploadFailedError('my-bucket', 'fn1.zip', ConnectionError('reset'))
    function_creator = FakeFunctionCreator()
    creator = LambdaCreator(FakePackager(), FakeUploader(error), function_creator)

    if flow == 'create':
        future = creator.create_lambda('/src/fn1', 'Handler.java', function_details, 'my-bucket')
    else:
        future = creator.update_lambda('/src/fn1', 'Handler.java', function_details, 'my-bucket')

    assert future.exception(timeout=5) is error
    assert function_creator.create_calls == []
    assert function_creator.update_calls == []


def test_artifact_released_after_upload(function_details):
    """Test that the archive is released once uploaded, before the function is created."""
    packager = FakePackager()
    released_before_create = []

    class CheckingFunctionCreator(FakeFunctionCreator):
        def create(self, details, uploaded_code):
            released_before_create.extend(packager.released)
            return super().create(details, uploaded_code)

    creator = LambdaCreator(packager, FakeUploader(), CheckingFunctionCreator())

    creator.create_lambda('/src/fn1', 'Handler.java', function_details, 'my-bucket').result(timeout=5)

    assert packager.released == [Artifact(location=Path('/tmp/fn1.zip'))]
    assert released_before_create == packager.released


def test_artifact_released_after_failed_upload(function_details):
    """Test that a failed upload still releases the archive."""
    packager = FakePackager()
    error = UploadFailedError('my-bucket', 'fn1.zip', ConnectionError('reset'))
    creator = LambdaCreator(packager, FakeUploader(error), FakeFunctionCreator())

    future = creator.update_lambda('/src/fn1', 'Handler.java', function_details, 'my-bucket')

    assert future.exception(timeout=5) is error
    assert packager.released == [Artifact(location=Path('/tmp/fn1.zip'))]


def test_artifact_released_when_upload_raises(function_details):
    """Test that the archive is released when the uploader raises instead of failing a future."""
    packager = FakePackager()
    error = ValueError('bad bucket')

    class RaisingUploader(FakeUploader):
        def upload(self, details, code, s3_bucket):
            raise error

    creator = LambdaCreator(packager, RaisingUploader(), FakeFunctionCreator())

    future = creator.create_lambda('/src/fn1', 'Handler.java', function_details, 'my-bucket')

    assert future.exception(timeout=5) is error
    assert len(packager.released) == 1


def test_lifecycle_failure_is_not_rewrapped(function_details):
    """Test that errors of the final stage reach the caller unchanged."""
    error = RuntimeError('rejected')
    creator = LambdaCreator(FakePackager(), FakeUploader(), FakeFunctionCreator(error))

    future = creator.create_lambda('/src/fn1', 'Handler.java', function_details, 'my-bucket')

    assert future.exception(timeout=5) is error


def test_stage_waits_for_previous_stage(function_details):
    """Test that upload starts only after packaging has finished."""
    release = threading.Event()
    uploader = FakeUploader()
    executor = ThreadPoolExecutor(max_workers=2)

    class SlowPackager(FakePackager):
        def create_package(self, module, source_file):
            def build():
                release.wait(timeout=5)
                return Artifact(location=Path('/tmp/fn1.zip'))
            return executor.submit(build)

    creator = LambdaCreator(SlowPackager(), uploader, FakeFunctionCreator())
    future = creator.create_lambda('/src/fn1', 'Handler.java', function_details, 'my-bucket')

    assert uploader.calls == []
    release.set()
    future.result(timeout=5)
    assert len(uploader.calls) == 1
    executor.shutdown()


def test_concurrent_deployments_are_independent(function_details):
    """Test that deployments of different functions run side by side."""
    barrier = threading.Barrier(2, timeout=5)
    executor = ThreadPoolExecutor(max_workers=4)

    class RendezvousUploader(FakeUploader):
        def upload(self, details, code, s3_bucket):
            def put():
                # Both deployments must be uploading at the same time to pass.
                barrier.wait()
                return UploadedCode(s3_bucket, details.archive_key, None)
            return executor.submit(put)

    creator = LambdaCreator(FakePackager(), RendezvousUploader(), FakeFunctionCreator())
    other_details = FunctionUploadDetails(
        name='fn2',
        handler='app.handler',
        runtime='python3.12',
        role_arn='arn:aws:iam::123:role/r',
    )

    first = creator.create_lambda('/src/fn1', 'Handler.java', function_details, 'my-bucket')
    second = creator.create_lambda('/src/fn2', 'app.py', other_details, 'my-bucket')

    assert first.result(timeout=10).name == 'fn1'
    assert second.result(timeout=10).name == 'fn2'
    executor.shutdown()


def test_end_to_end_with_s3(s3_client, account_settings, tmp_path, function_details):
    """Test a full create against mocked S3 and a mocked Lambda client."""
    s3_client.create_bucket(Bucket='my-bucket')
    archive = tmp_path / 'fn1.zip'
    archive.write_bytes(b'code')

    class LocalPackager(FakePackager):
        def create_package(self, module, source_file):
            return completed(Artifact(location=archive))

    mock_lambda_client = MagicMock()
    mock_lambda_client.create_function.side_effect = lambda **params: {
        'FunctionName': params['FunctionName'],
        'FunctionArn': f"arn:aws:lambda:us-east-1:123:function:{params['FunctionName']}",
        'Handler': params['Handler'],
        'Runtime': params['Runtime'],
        'Role': params['Role'],
        'Timeout': params['Timeout'],
        'MemorySize': params['MemorySize'],
    }
    creator = LambdaCreator(
        LocalPackager(),
        CodeUploader(s3_client),
        LambdaFunctionCreator(mock_lambda_client, account_settings, wait_for_update=False)
    )

    function = creator.create_lambda(tmp_path, 'Handler.java', function_details, 'my-bucket').result(timeout=10)

    _, kwargs = mock_lambda_client.create_function.call_args
    assert kwargs['Code'] == {'S3Bucket': 'my-bucket', 'S3Key': 'fn1.zip'}
    assert s3_client.get_object(Bucket='my-bucket', Key='fn1.zip')['Body'].read() == b'code'
    assert function.name == 'fn1'
    assert function.runtime == 'java8'
    assert function.role == 'arn:aws:iam::123:role/r'
    assert function.timeout == 30
    assert function.memory_size == 512
    assert function.region == 'us-east-1'


@patch('lambda_uploader.main.LambdaFunctionCreator')
@patch('lambda_uploader.main.CodeUploader')
def test_factory_shares_account_clients(mock_code_uploader, mock_function_creator):
    """Test that the factory wires clients of the active account."""
    account_settings = MagicMock()
    packager = FakePackager()

    creator = LambdaCreatorFactory.create(account_settings, packager)

    account_settings.client.assert_any_call('s3')
    account_settings.client.assert_any_call('lambda')
    mock_code_uploader.assert_called_once_with(account_settings.client.return_value)
    mock_function_creator.assert_called_once_with(account_settings.client.return_value, account_settings)
    assert creator.packager is packager
    assert creator.uploader is mock_code_uploader.return_value
    assert creator.function_creator is mock_function_creator.return_value
