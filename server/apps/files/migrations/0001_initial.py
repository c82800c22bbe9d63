import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='CatalogEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('kind', models.CharField(choices=[('folder', 'Folder'), ('file', 'File'), ('image', 'Image')], max_length=16)),
                ('is_public', models.BooleanField(default=False, help_text='Whether anyone may fetch the content')),
                ('blob_ref', models.CharField(blank=True, default='', help_text='Locator of the content in the blob store', max_length=255)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='catalog_entries', to=settings.AUTH_USER_MODEL)),
                ('parent', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.RESTRICT, related_name='children', to='files.catalogentry')),
            ],
            options={
                'verbose_name': 'Catalog entry',
                'verbose_name_plural': 'Catalog entries',
                'ordering': ['-id'],
                'indexes': [models.Index(fields=['owner', 'parent', '-id'], name='catalog_owner_parent_idx')],
                'constraints': [models.CheckConstraint(condition=models.Q(models.Q(('blob_ref', ''), ('kind', 'folder')), models.Q(models.Q(('kind', 'folder'), _negated=True), models.Q(('blob_ref', ''), _negated=True)), _connector='OR'), name='catalog_blob_ref_matches_kind')],
            },
        ),
    ]
