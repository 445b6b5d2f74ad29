class TestLogsEndpoint:

    def test_returns_recent_entries(self, client_for, make_source):
        client = client_for(make_source('A'))

        response = client.get('/api/v1/logs')

        assert response.status_code == 200
        logs = response.json()['logs']
        assert logs
        assert {'timestamp', 'level', 'component', 'message'} <= set(logs[0])
        assert any('Application ready' in entry['message'] for entry in logs)

    def test_filters_by_minimum_level(self, client_for, make_source):
        client = client_for(make_source('Broken', error=RuntimeError('HTTP status 502')))
        client.get('/api/v1/assets?ids=USD_EGP')

        warnings = client.get('/api/v1/logs', params={'level': 'warn'}).json()['logs']
        errors = client.get('/api/v1/logs', params={'level': 'error'}).json()['logs']

        assert {entry['level'] for entry in warnings} <= {'warn', 'error'}
        assert any('Source Broken failed during fetch' in entry['message'] for entry in warnings)
        assert errors
        assert all(entry['level'] == 'error' for entry in errors)
        assert any('Sources unavailable' in entry['message'] for entry in errors)

    def test_unknown_level_is_rejected(self, client_for):
        response = client_for().get('/api/v1/logs?level=verbose')

        assert response.status_code == 422
