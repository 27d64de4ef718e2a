from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='SiteSetting',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('key', models.CharField(max_length=100, unique=True)),
                ('value', models.JSONField(default=dict)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'site_settings',
            },
        ),
        migrations.CreateModel(
            name='SupportMessage',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('user_id', models.CharField(db_index=True, max_length=100)),
                ('user_email', models.EmailField(blank=True, default='', max_length=255)),
                ('user_name', models.CharField(blank=True, default='', max_length=255)),
                ('sender_role', models.CharField(choices=[('user', 'User'), ('admin', 'Admin')], max_length=10)),
                ('admin_id', models.CharField(blank=True, max_length=100, null=True)),
                ('body', models.TextField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('read_at', models.DateTimeField(blank=True, null=True)),
            ],
            options={
                'db_table': 'support_chat_messages',
                'ordering': ['created_at', 'id'],
                'indexes': [
                    models.Index(fields=['user_id', 'created_at'], name='support_msg_user_created_idx'),
                ],
            },
        ),
    ]
